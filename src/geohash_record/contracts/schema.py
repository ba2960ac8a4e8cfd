"""Record schema types.

A schema describes the fields a record may carry and decides whether a
value can be written at a given field. Schemas can be:

1. Dynamic: Accept any fields with any values
2. Strict: Accept exactly the declared fields (no extras)
3. Free: Type-check the declared fields, allow extras

Example YAML:
    schema:
      mode: free
      fields:
        - "latitude: float?"
        - "longitude: float?"
        - "geohash: str?"
        - location:
            mode: strict
            fields:
              - "lat: float?"

Unquoted items such as `- lat: float` reach us as one-key mappings; both
forms are accepted. A nested record maps its name (with a trailing "?" when
optional) to a schema of its own.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

FieldType = Literal["str", "int", "float", "bool", "any", "record"]

# "record" needs its own field list, so only the nested mapping form declares it
SCALAR_TYPES: tuple[str, ...] = ("str", "int", "float", "bool", "any")


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a single field in a record schema.

    Attributes:
        name: Field name (must be valid Python identifier)
        field_type: One of: str, int, float, bool, any, record
        required: If False, field can be missing or None
        schema: Nested schema when field_type is "record", else None
    """

    name: str
    field_type: FieldType
    required: bool = True
    schema: RecordSchema | None = None

    @classmethod
    def parse(cls, spec: str) -> FieldDefinition:
        """Parse "name: type" or "name: type?" (trailing '?' means optional).

        Raises:
            ValueError: If the text is malformed, the name is not an
                identifier, or the type is not a scalar type
        """
        name, sep, type_text = (part.strip() for part in spec.partition(":"))
        if not sep or not name or not type_text:
            raise ValueError(f"Invalid field spec '{spec.strip()}'. Expected 'name: type' or 'name: type?'")

        optional = type_text.endswith("?")
        type_name = type_text.removesuffix("?").strip()
        if type_name not in SCALAR_TYPES:
            raise ValueError(f"Unknown type '{type_name}' for field '{name}'. Scalar types: {', '.join(SCALAR_TYPES)}")
        if not name.isidentifier():
            raise ValueError(f"Invalid field name '{name}': must be a Python identifier")

        return cls(name=name, field_type=type_name, required=not optional)  # type: ignore[arg-type]

    def accepts(self, value: Any) -> bool:
        """Whether this field's declared type accepts the value.

        bool is excluded from int/float even though Python treats it as
        an int subclass: a flag is never a coordinate.
        """
        if value is None:
            return not self.required

        match self.field_type:
            case "any":
                return True
            case "str":
                return isinstance(value, str)
            case "bool":
                return isinstance(value, bool)
            case "int":
                return isinstance(value, int) and not isinstance(value, bool)
            case "float":
                return isinstance(value, (int, float)) and not isinstance(value, bool)
            case "record":
                return isinstance(value, Mapping)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.field_type,
            "required": self.required,
        }
        if self.schema is not None:
            result["schema"] = self.schema.to_dict()
        return result


def _parse_field_entry(entry: Any, *, index: int) -> FieldDefinition:
    """Parse one item of a schema 'fields' list.

    Items are "name: type" strings, {"name": "type"} dicts (what YAML
    makes of an unquoted item), or {"name": {schema}} for a nested record.
    """
    if isinstance(entry, str):
        return FieldDefinition.parse(entry)

    if not isinstance(entry, dict) or len(entry) != 1:
        raise ValueError(f"fields[{index}]: expected 'name: type' or a single-key mapping, got {entry!r}")

    key, value = next(iter(entry.items()))
    if not isinstance(key, str):
        raise ValueError(f"fields[{index}]: field name must be a string, got {type(key).__name__}")

    if isinstance(value, str):
        return FieldDefinition.parse(f"{key}: {value}")
    if not isinstance(value, dict):
        raise ValueError(f"fields[{index}]: '{key}' must map to a type name or a nested schema, got {type(value).__name__}")

    name = key.removesuffix("?").strip()
    if not name.isidentifier():
        raise ValueError(f"fields[{index}]: invalid nested record name '{name}'")
    return FieldDefinition(name=name, field_type="record", required=not key.endswith("?"), schema=RecordSchema.from_dict(value))


@dataclass(frozen=True)
class RecordSchema:
    """Schema shared by every record of a batch.

    Attributes:
        mode: "strict" (exact fields), "free" (at least these), or None (dynamic)
        fields: Tuple of FieldDefinitions, or None if dynamic
        is_dynamic: True if schema accepts any fields
    """

    mode: Literal["strict", "free"] | None
    fields: tuple[FieldDefinition, ...] | None
    is_dynamic: bool

    @classmethod
    def dynamic(cls) -> RecordSchema:
        """Schema that accepts any field with any value."""
        return cls(mode=None, fields=None, is_dynamic=True)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> RecordSchema:
        """Build a schema from its settings form.

        `{"fields": "dynamic"}` (or `{"mode": "dynamic", ...}`) gives a
        dynamic schema. Explicit field lists need a mode of "strict" or
        "free".

        Raises:
            ValueError: If config is invalid
        """
        if "fields" not in config:
            raise ValueError("'fields' key is required in a schema: a list of fields or 'dynamic'")

        fields_value = config["fields"]
        if fields_value == "dynamic" or config.get("mode") == "dynamic":
            return cls.dynamic()

        mode = config.get("mode")
        if mode is None:
            raise ValueError("'mode' key is required with an explicit field list: 'strict' or 'free'")
        if mode not in ("strict", "free"):
            raise ValueError(f"Invalid schema mode '{mode}'; expected 'strict' or 'free'")
        if not isinstance(fields_value, list):
            raise ValueError(f"Schema fields must be a list or 'dynamic', got {type(fields_value).__name__}")
        if not fields_value:
            raise ValueError("A schema with explicit fields needs at least one field (or use fields: dynamic)")

        parsed = tuple(_parse_field_entry(entry, index=i) for i, entry in enumerate(fields_value))
        duplicates = sorted(name for name, count in Counter(f.name for f in parsed).items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate field names in schema: {', '.join(duplicates)}")

        return cls(mode=mode, fields=parsed, is_dynamic=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and round-tripping."""
        if self.is_dynamic:
            return {"mode": "dynamic", "fields": "dynamic"}
        return {
            "mode": self.mode,
            "fields": [_field_to_spec(f) for f in self.fields or ()],
        }

    @property
    def allows_extra_fields(self) -> bool:
        """Whether fields beyond the declared ones are allowed."""
        return self.is_dynamic or self.mode == "free"

    def get_field(self, name: str) -> FieldDefinition | None:
        """Declared definition for a field name, or None if undeclared."""
        for field_def in self.fields or ():
            if field_def.name == name:
                return field_def
        return None

    def child_schema(self, name: str) -> RecordSchema | None:
        """Schema governing a nested record stored under a field.

        Returns:
            The declared nested schema, a dynamic schema for undeclared
            fields when extras are allowed, or None when the field cannot
            hold a nested record.
        """
        field_def = self.get_field(name)
        if field_def is None:
            return RecordSchema.dynamic() if self.allows_extra_fields else None
        if field_def.field_type == "record":
            return field_def.schema
        if field_def.field_type == "any":
            return RecordSchema.dynamic()
        return None


def _field_to_spec(field_def: FieldDefinition) -> str | dict[str, Any]:
    """Inverse of _parse_field_entry."""
    marker = "" if field_def.required else "?"
    if field_def.field_type == "record" and field_def.schema is not None:
        return {f"{field_def.name}{marker}": field_def.schema.to_dict()}
    return f"{field_def.name}: {field_def.field_type}{marker}"
