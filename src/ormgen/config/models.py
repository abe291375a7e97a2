"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (ORMGEN__SECTION__KEY)
3. Project YAML (ormgen.yaml next to the record definitions)
4. Global YAML (~/.config/ormgen/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    ORMGEN__<SECTION>__<KEY>=<VALUE>

Examples:
    ORMGEN__LOGGING__LEVEL=DEBUG
    ORMGEN__CODEGEN__DIALECT=sqlite
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        ORMGEN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO reports one event per compiled record.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CodegenConfig(BaseModel):
    """Code generation configuration.

    Env vars:
        ORMGEN__CODEGEN__DIALECT: Target SQL dialect (postgres, mysql, sqlite)
        ORMGEN__CODEGEN__RUNTIME_MODULE: Module the generated code imports driver protocols from
        ORMGEN__CODEGEN__HEADER: Emit the "generated by" banner
    """

    dialect: str = Field(
        default="postgres",
        description="Target SQL dialect. Selected once per compilation.",
    )
    runtime_module: str = Field(
        default="ormgen.runtime",
        description="Import path providing Executor, Arguments, Row, NotFound "
        "and AmbiguousResult to generated modules.",
    )
    header: bool = Field(
        default=True,
        description="Prefix generated modules with a do-not-edit banner.",
    )

    @field_validator("dialect")
    @classmethod
    def validate_dialect(cls, v: str) -> str:
        from ormgen.codegen.dialects import available_dialects

        name = v.lower()
        if name not in available_dialects():
            raise ValueError(f"Unknown dialect {v!r}, expected one of {available_dialects()}")
        return name

    @field_validator("runtime_module")
    @classmethod
    def validate_runtime_module(cls, v: str) -> str:
        if not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"Not a dotted module path: {v!r}")
        return v


class OrmgenConfig(BaseModel):
    """Root configuration for ormgen.

    All settings can be configured via:
    1. Environment variables: ORMGEN__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    codegen: CodegenConfig = Field(default_factory=CodegenConfig)
