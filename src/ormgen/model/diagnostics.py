"""Model diagnostics - location-tagged errors collected across one compilation.

Parsing and validation never stop at the first problem. Every stage reports
into a shared Diagnostics collector and the compilation fails once, with the
complete list, when the collector is checked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ormgen.core.errors import ErrorCode, OrmgenError


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of an annotation in a record definition file (1-based)."""

    path: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single model error."""

    code: ErrorCode
    message: str
    location: SourceLocation

    def format(self) -> str:
        return f"{self.location}: error[{self.code.name}]: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.code.name,
            "message": self.message,
            "path": self.location.path,
            "line": self.location.line,
            "column": self.location.column,
        }


@dataclass
class Diagnostics:
    """Collector shared by the loader, parser and builder."""

    items: list[Diagnostic] = field(default_factory=list)

    def error(self, code: ErrorCode, message: str, location: SourceLocation) -> None:
        self.items.append(Diagnostic(code=code, message=message, location=location))

    def extend(self, other: Diagnostics) -> None:
        self.items.extend(other.items)

    @property
    def has_errors(self) -> bool:
        return bool(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def codes(self) -> list[ErrorCode]:
        return [d.code for d in self.items]

    def sorted(self) -> list[Diagnostic]:
        """Diagnostics in source order, stable for equal positions."""
        return sorted(
            self.items,
            key=lambda d: (d.location.path, d.location.line, d.location.column),
        )

    def raise_if_errors(self) -> None:
        if self.items:
            raise ModelValidationError.from_diagnostics(self.sorted())


class ModelValidationError(OrmgenError):
    """One or more record definitions violate the model."""

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self.details.get("diagnostics", ()))

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["details"] = {"diagnostics": [d.to_dict() for d in self.diagnostics]}
        return result

    @classmethod
    def from_diagnostics(cls, diagnostics: list[Diagnostic]) -> ModelValidationError:
        count = len(diagnostics)
        noun = "error" if count == 1 else "errors"
        return cls(
            code=ErrorCode.MODEL_INVALID,
            message=f"{count} model {noun} found",
            details={"diagnostics": tuple(diagnostics)},
        )
