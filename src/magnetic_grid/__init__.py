"""magnetic-grid: drag, drop and resize fields on a magnetic 6-column grid."""

__version__ = "0.1.0"
