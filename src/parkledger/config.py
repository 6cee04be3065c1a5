# File: src/parkledger/config.py
"""
Application configuration

Defaults can be overridden through PARKLEDGER_* environment variables and,
on the command line, through flags of the same name.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional
import logging
import os

from .domain.log_table import INITIAL_CAPACITY, LOAD_FACTOR_THRESHOLD


ENV_PREFIX = "PARKLEDGER_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class AppConfig:
    """Settings for the lot registry, log tables and logging"""
    max_lots: int = 20
    initial_table_capacity: int = INITIAL_CAPACITY
    load_factor_threshold: float = LOAD_FACTOR_THRESHOLD
    resize_on_every_insert: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration values"""
        if self.max_lots <= 0:
            raise ValueError(f"max_lots must be positive, got: {self.max_lots}")

        if self.initial_table_capacity <= 0:
            raise ValueError(
                f"initial_table_capacity must be positive, got: {self.initial_table_capacity}"
            )

        if self.load_factor_threshold <= 0:
            raise ValueError(
                f"load_factor_threshold must be positive, got: {self.load_factor_threshold}"
            )

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Build a configuration from PARKLEDGER_* variables"""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for config_field in fields(cls):
            raw = environ.get(ENV_PREFIX + config_field.name.upper())
            if raw is None:
                continue
            values[config_field.name] = _convert(config_field.name, raw, config_field.default)

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> 'AppConfig':
        """Copy with every non-None override applied"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return AppConfig(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _convert(name: str, raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be a boolean, got: {raw}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw
