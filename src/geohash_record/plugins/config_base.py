# src/geohash_record/plugins/config_base.py
"""Typed plugin options.

Every plugin validates its options dict through a PluginConfig subclass.
Unknown keys are rejected and validated configs are frozen. Any failure
surfaces as PluginConfigError naming the config class.

Example:
    class JSONReaderConfig(PluginConfig):
        format: Literal["json", "jsonl"] = "json"
        encoding: str = "utf-8"

    cfg = JSONReaderConfig.from_dict(config)
    encoding = cfg.encoding  # Direct access, fails fast if invalid
"""

from typing import Any, Self

from pydantic import BaseModel

from geohash_record.contracts import GeohashRecordError, InvalidRecordPathError
from geohash_record.core.record_path import parse_record_path


class PluginConfigError(GeohashRecordError):
    """Plugin options failed validation."""


class PluginConfig(BaseModel):
    """Base class for typed plugin configurations.

    Frozen so one validated config can back plugin instances running in
    parallel threads.
    """

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Validate a plugin options dict.

        Raises:
            PluginConfigError: If config is not a dict or fails validation
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")

        try:
            return cls.model_validate(config)
        except ValueError as e:  # ValidationError included
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e


def validate_record_path(value: str) -> str:
    """Field validator body for record path options.

    Raises:
        ValueError: If the expression is not a '/name' segment path.
            Pydantic turns this into a ValidationError.
    """
    try:
        parse_record_path(value)
    except InvalidRecordPathError as e:
        raise ValueError(str(e)) from e
    return value
