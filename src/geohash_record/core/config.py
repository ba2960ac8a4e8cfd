# src/geohash_record/core/config.py
"""
Configuration schema and loading for geohash-record.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction, so one settings
object can back processors running in parallel threads.
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from geohash_record.contracts import GeohashFormat, ProcessingMode, RecordSchema, RoutingStrategy
from geohash_record.core.geohash import max_precision
from geohash_record.core.record_path import parse_record_path
from geohash_record.plugins.config_base import validate_record_path


class GeohashSettings(BaseModel):
    """Geohash conversion and routing options.

    Example YAML:
        geohash:
          mode: ENCODE
          routing_strategy: SKIP_UNENRICHED
          geohash_format: BASE_32
          precision: 12
          latitude_path: /latitude
          longitude_path: /longitude
          geohash_path: /geohash
    """

    model_config = {"frozen": True, "extra": "forbid"}

    mode: ProcessingMode = Field(description="ENCODE (lat/lon -> geohash) or DECODE (geohash -> lat/lon)")
    routing_strategy: RoutingStrategy = Field(
        default=RoutingStrategy.SKIP_UNENRICHED,
        description="Batch routing policy",
    )
    geohash_format: GeohashFormat = Field(default=GeohashFormat.BASE_32)
    precision: int = Field(default=12, ge=1, description="Characters for BASE_32, bits for BINARY")
    latitude_path: str = Field(default="/latitude")
    longitude_path: str = Field(default="/longitude")
    geohash_path: str = Field(default="/geohash")

    @field_validator("latitude_path", "longitude_path", "geohash_path")
    @classmethod
    def validate_paths(cls, v: str) -> str:
        """Reject anything that is not a '/name' segment path."""
        return validate_record_path(v)

    @model_validator(mode="after")
    def validate_precision_and_paths(self) -> "GeohashSettings":
        """Check precision against the format ceiling and path distinctness.

        Path distinctness compares parsed paths, so '/a' and '/a' written
        differently in YAML cannot sneak through.
        """
        ceiling = max_precision(self.geohash_format)
        if self.precision > ceiling:
            raise ValueError(f"precision {self.precision} exceeds the maximum of {ceiling} for {self.geohash_format.value}")

        parsed = {parse_record_path(p) for p in (self.latitude_path, self.longitude_path, self.geohash_path)}
        if len(parsed) != 3:
            raise ValueError("latitude_path, longitude_path and geohash_path must be distinct")
        return self

    def transform_options(self) -> dict[str, Any]:
        """Options for GeohashRecordTransform (everything but routing)."""
        return self.model_dump(mode="json", exclude={"routing_strategy"})


class ReaderSettings(BaseModel):
    """Record reader plugin configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    plugin: str = Field(default="json", description="Registered reader name")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific configuration options",
    )


class WriterSettings(BaseModel):
    """Record writer plugin configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    plugin: str = Field(default="json", description="Registered writer name")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific configuration options",
    )


class RecordSchemaSettings(BaseModel):
    """Schema attached to every record read from the input.

    Example YAML:
        schema:
          mode: free
          fields:
            - "latitude: float"
            - "longitude: float"
            - "geohash: str?"
    """

    model_config = {"frozen": True, "extra": "forbid"}

    mode: str | None = None
    fields: list[Any] | str = Field(description="Field specs, or 'dynamic'")

    @model_validator(mode="after")
    def validate_schema(self) -> "RecordSchemaSettings":
        """Parse eagerly so a bad schema fails at load time."""
        self.to_schema()
        return self

    def to_schema(self) -> RecordSchema:
        """Build the RecordSchema described by these settings.

        Raises:
            ValueError: If the field specs are malformed
        """
        return RecordSchema.from_dict(self.model_dump(exclude_none=True))


class GeohashRecordSettings(BaseModel):
    """Top-level geohash-record configuration.

    This is the single source of truth for a processing run.
    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    geohash: GeohashSettings = Field(description="Conversion and routing options")
    reader: ReaderSettings = Field(default_factory=ReaderSettings)
    writer: WriterSettings = Field(default_factory=WriterSettings)
    record_schema: RecordSchemaSettings | None = Field(
        default=None,
        alias="schema",
        description="Record schema. Omitted means dynamic (any fields).",
    )

    def build_schema(self) -> RecordSchema:
        """Schema for the records of every batch."""
        if self.record_schema is None:
            return RecordSchema.dynamic()
        return self.record_schema.to_schema()


# ${NAME} or ${NAME:-fallback}
_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Z_][A-Z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def _substitute_env(match: re.Match[str]) -> str:
    value = os.environ.get(match["name"], match["fallback"])
    # Unresolved references stay verbatim so validation points at them
    return match[0] if value is None else value


def _expand_env_vars(value: Any) -> Any:
    """Expand ${NAME} and ${NAME:-fallback} in every string of a settings tree."""
    match value:
        case str():
            return _ENV_REFERENCE.sub(_substitute_env, value)
        case dict():
            return {key: _expand_env_vars(item) for key, item in value.items()}
        case list():
            return [_expand_env_vars(item) for item in value]
        case _:
            return value


# Keys Dynaconf reports from as_dict() that describe the loader itself
_DYNACONF_KEYS = frozenset({"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"})


def load_settings(config_path: Path) -> GeohashRecordSettings:
    """Load and validate a settings file.

    Sources, strongest first:
        GEOHASH_RECORD_* environment variables (GEOHASH_RECORD_GEOHASH__PRECISION=8)
        the YAML file
        model defaults

    String values may reference the environment as ${NAME} or
    ${NAME:-fallback}.

    Raises:
        FileNotFoundError: If config_path does not exist
        ValidationError: If the merged settings are invalid
    """
    from dynaconf import Dynaconf

    # Dynaconf treats a missing file as empty settings
    if not config_path.is_file():
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    loaded = Dynaconf(
        envvar_prefix="GEOHASH_RECORD",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,  # the CLI owns .env handling
        merge_enabled=True,
    ).as_dict()

    raw = {key.lower(): value for key, value in loaded.items() if key not in _DYNACONF_KEYS}
    return GeohashRecordSettings.model_validate(_expand_env_vars(raw))


def resolve_config(settings: GeohashRecordSettings) -> dict[str, Any]:
    """Convert validated settings to a plain dict, defaults included.

    Keys use their YAML names (``schema``, not ``record_schema``) so the
    result can be written back out as a settings file.
    """
    return settings.model_dump(mode="json", by_alias=True, exclude_none=True)
