# settings_loader.py
import json
import os
from dataclasses import fields, replace
from typing import Optional, Union, get_args, get_origin
from settings_schema import SettingsSchema


def _cast(value, target_type):
    origin = get_origin(target_type)

    if origin is Union:
        if value is None:
            return None
        args = [a for a in get_args(target_type) if a is not type(None)]
        return _cast(value, args[0])
    if target_type is bool:
        if not isinstance(value, bool):
            raise TypeError(f"not a bool: {value!r}")
        return value
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    if target_type is str:
        return str(value)

    return value


def load(path: Optional[str] = None, **overrides) -> SettingsSchema:
    raw = {}
    if path is not None and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)

    schema = SettingsSchema()
    schema_fields = {f.name: f for f in fields(SettingsSchema)}

    updates = {}

    for key, value in list(raw.items()) + list(overrides.items()):
        if key not in schema_fields:
            raise KeyError(f"Unknown setting key: {key}")

        field = schema_fields[key]
        try:
            updates[key] = _cast(value, field.type)
        except Exception as e:
            raise TypeError(
                f"Invalid type for '{key}': expected {field.type}, got {value}"
            ) from e

    return replace(schema, **updates)
