"""ormgen error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Model (annotation parsing and semantic validation)
- 4xxx: Source (reading record definition files)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    UNKNOWN_DIALECT = 2005

    # Model (3xxx)
    MISSING_ID = 3001
    DUPLICATE_ID = 3002
    MISSING_TYPE_OVERRIDE = 3003
    UNKNOWN_ANNOTATION_KEY = 3004
    DUPLICATE_ACCESSOR_KIND = 3005
    DANGLING_ACCESSOR_REFERENCE = 3006
    DANGLING_FIELD_REFERENCE = 3007
    MISSING_REQUIRED_KEY = 3008
    MALFORMED_VALUE = 3009
    DUPLICATE_FIELD = 3010
    NAME_COLLISION = 3011
    SOURCE_SYNTAX_ERROR = 3012
    MODEL_INVALID = 3099

    # Source (4xxx)
    SOURCE_NOT_FOUND = 4001
    SOURCE_UNREADABLE = 4002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class OrmgenError(Exception):
    """Base error with structured context for CLI and library callers."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(OrmgenError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def unknown_dialect(cls, name: str, available: list[str]) -> "ConfigError":
        return cls(
            code=ErrorCode.UNKNOWN_DIALECT,
            message=f"Unknown dialect '{name}' (available: {', '.join(available)})",
            details={"dialect": name, "available": available},
        )


class SourceError(OrmgenError):
    """Record definition files that cannot be read."""

    @classmethod
    def not_found(cls, path: str) -> "SourceError":
        return cls(
            code=ErrorCode.SOURCE_NOT_FOUND,
            message=f"Record source not found: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "SourceError":
        return cls(
            code=ErrorCode.SOURCE_UNREADABLE,
            message=f"Cannot read record source {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(OrmgenError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
