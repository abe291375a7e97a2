"""Config module exports."""

from ormgen.config.loader import load_config
from ormgen.config.models import (
    CodegenConfig,
    LoggingConfig,
    LogOutputConfig,
    OrmgenConfig,
)

__all__ = [
    "load_config",
    "OrmgenConfig",
    "CodegenConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
