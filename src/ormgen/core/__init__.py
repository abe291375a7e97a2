"""Core module exports."""

from ormgen.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    OrmgenError,
    SourceError,
)
from ormgen.core.logging import (
    clear_compilation_id,
    configure_logging,
    get_compilation_id,
    get_logger,
    set_compilation_id,
)

__all__ = [
    # Errors
    "OrmgenError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "SourceError",
    # Logging
    "clear_compilation_id",
    "configure_logging",
    "get_compilation_id",
    "get_logger",
    "set_compilation_id",
]
