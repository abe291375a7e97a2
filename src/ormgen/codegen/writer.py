"""Indentation-aware source builder shared by the emitters."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from ormgen.core.errors import InternalError

INDENT = "    "


class SourceWriter:
    """Accumulates lines of Python source.

    Emitters write into their own writer and the compilation unit splices the
    fragments together with ``include``. Runtime names a fragment needs are
    tracked with ``require`` so the unit imports exactly what is used.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._level = 0
        self._required: set[str] = set()

    @property
    def required(self) -> frozenset[str]:
        return frozenset(self._required)

    def require(self, *names: str) -> None:
        self._required.update(names)

    def line(self, code: str = "") -> None:
        self._lines.append(f"{INDENT * self._level}{code}" if code else "")

    def lines(self, codes: list[str]) -> None:
        for code in codes:
            self.line(code)

    def separate(self) -> None:
        """Blank line, unless at the start of a block or after another blank."""
        if self._lines and self._lines[-1] and not self._lines[-1].endswith(":"):
            self._lines.append("")

    def docstring(self, text: str) -> None:
        self.line(f'"""{text}"""')

    def indent(self) -> None:
        self._level += 1

    def dedent(self) -> None:
        if self._level == 0:
            raise InternalError.unexpected("dedent below column zero")
        self._level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[SourceWriter]:
        self.line(header)
        self.indent()
        try:
            yield self
        finally:
            self.dedent()

    def include(self, fragment: SourceWriter) -> None:
        """Append another writer's lines at the current indentation."""
        for code in fragment._lines:
            self.line(code)
        self._required.update(fragment._required)

    def __bool__(self) -> bool:
        return any(self._lines)

    def getvalue(self) -> str:
        lines = list(self._lines)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""


def literal(text: str) -> str:
    """Python string literal for text."""
    return repr(text)
