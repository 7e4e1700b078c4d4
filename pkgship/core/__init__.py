"""Core types shared by every layer."""

from .config import ConfigError, DeployConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    "ConfigError",
    "DeployConfig",
    "Err",
    "ErrorCode",
    "Ok",
    "Result",
    "load_config",
]
