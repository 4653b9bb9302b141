"""Core domain types and logic."""

from .config import ConfigError, FileDefaults, Mode, RunConfig, load_defaults, resolve_config
from .errors import ErrorCode
from .result import Err, Ok, Result
from .targets import TargetListError, read_targets

__all__ = [
    # config
    "ConfigError",
    "FileDefaults",
    "Mode",
    "RunConfig",
    "load_defaults",
    "resolve_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # targets
    "TargetListError",
    "read_targets",
]
