"""Serialize layouts to/from flat records, JSON and YAML.

The persisted form is one record per field: ``{id, width, x, y}``.
Floats are written as-is so a round trip reproduces identical
placements.
"""

from __future__ import annotations

import json
from typing import Any

import yaml
from pydantic import ValidationError

from magnetic_grid.exceptions import LayoutDefinitionError
from magnetic_grid.grid.models import FieldPlacement, Layout, ordered


class LayoutSerializer:
    """Convert between ``Layout`` and its serialized forms."""

    @staticmethod
    def to_records(layout: Layout) -> list[dict[str, Any]]:
        return [
            {"id": p.id, "width": p.width, "x": p.position.x, "y": p.position.y}
            for p in ordered(layout)
        ]

    @staticmethod
    def from_records(records: Any) -> Layout:
        """Build a layout from a list of records.

        Accepts ``x``/``y`` and the older ``positionX``/``positionY`` keys.
        """
        if isinstance(records, dict) and "fields" in records:
            records = records["fields"]
        if records is None:
            return {}
        if not isinstance(records, list):
            raise LayoutDefinitionError(f"Expected a list of field records, got {type(records).__name__}")

        layout: Layout = {}
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise LayoutDefinitionError(f"Record {i} is not a mapping: {record!r}")
            field_id = record.get("id")
            if not field_id:
                raise LayoutDefinitionError(f"Record {i} has no 'id'")
            if field_id in layout:
                raise LayoutDefinitionError(f"Duplicate field id: {field_id}")
            try:
                layout[field_id] = FieldPlacement.at(
                    str(field_id),
                    x=float(record.get("x", record.get("positionX", 0.0))),
                    y=float(record.get("y", record.get("positionY", 0.0))),
                    width=float(record.get("width", 1.0)),
                )
            except (TypeError, ValueError, ValidationError) as e:
                raise LayoutDefinitionError(f"Invalid record for field '{field_id}': {e}") from e
        return layout

    @staticmethod
    def to_json(layout: Layout, indent: int | None = 2) -> str:
        return json.dumps(LayoutSerializer.to_records(layout), indent=indent)

    @staticmethod
    def from_json(json_str: str) -> Layout:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise LayoutDefinitionError(f"Invalid layout JSON: {e}") from e
        return LayoutSerializer.from_records(data)

    @staticmethod
    def to_yaml(layout: Layout) -> str:
        data = {"fields": LayoutSerializer.to_records(layout)}
        return yaml.dump(data, default_flow_style=False, sort_keys=False, width=120)

    @staticmethod
    def from_yaml(yaml_str: str) -> Layout:
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise LayoutDefinitionError(f"Invalid layout YAML: {e}") from e
        return LayoutSerializer.from_records(data)

    @staticmethod
    def loads(text: str, fmt: str = "auto") -> Layout:
        """Parse JSON or YAML; ``auto`` picks JSON when the text looks like it."""
        if fmt == "json" or (fmt == "auto" and text.lstrip().startswith(("[", "{"))):
            return LayoutSerializer.from_json(text)
        return LayoutSerializer.from_yaml(text)
