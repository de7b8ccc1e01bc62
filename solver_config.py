"""
Solver configuration: a JSON file of defaults, overridden by command-line flags.
"""

import json
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from cnf_io import INPUT_FORMATS
from sat_exceptions import ConfigurationError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class SolverConfig:
    timeout: Optional[float] = None
    fixpoint_propagation: bool = False
    verify: bool = True
    input_format: str = "lines"
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    solver_exit_codes: bool = False

    def validate(self) -> "SolverConfig":
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.input_format not in INPUT_FORMATS:
            raise ConfigurationError(
                f"input_format must be one of {INPUT_FORMATS}, got {self.input_format!r}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        return self


_FIELD_TYPES = {
    "timeout": (int, float, type(None)),
    "fixpoint_propagation": (bool,),
    "verify": (bool,),
    "input_format": (str,),
    "log_level": (str,),
    "log_file": (str, type(None)),
    "solver_exit_codes": (bool,),
}


def config_from_dict(values: Dict[str, Any]) -> SolverConfig:
    """
    Build a config from a plain dict.

    Raises:
        ConfigurationError: on unknown keys or wrongly typed values.
    """
    known = {f.name for f in fields(SolverConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"unknown config keys: {', '.join(unknown)}")

    for key, value in values.items():
        # bool is an int subclass, keep it out of the numeric timeout
        if not isinstance(value, _FIELD_TYPES[key]) or \
                (key == "timeout" and isinstance(value, bool)):
            raise ConfigurationError(f"invalid value for {key}: {value!r}")
    return SolverConfig(**values).validate()


def load_config(path: str) -> SolverConfig:
    """Load a ``SolverConfig`` from a JSON object file."""
    try:
        with open(path, 'r') as f:
            cfg = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read config {path}: {e}") from e

    if not isinstance(cfg, dict):
        raise ConfigurationError(f"config {path} must hold a JSON object")
    return config_from_dict(cfg)


def merge_options(config: SolverConfig, overrides: Dict[str, Any]) -> SolverConfig:
    """Return ``config`` with every non-None override applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **changes).validate()


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None):
    """Configure the root logger for command-line runs."""
    kwargs = {"level": getattr(logging, level.upper()), "format": LOG_FORMAT, "force": True}
    if log_file:
        kwargs.update(filename=log_file, filemode='w')
    logging.basicConfig(**kwargs)
