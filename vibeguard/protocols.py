"""Contracts between the core and the hosting environment.

The host (an editor integration, or the command-line scanner in
``vibeguard.commands``) supplies documents and receives diagnostics and
code actions. Positions are 0-based lines and characters.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vibeguard.presentation.presenter import PresentedDiagnostic


@runtime_checkable
class TextDocument(Protocol):
    """Text source: a document's current content and language."""

    uri: str
    language_id: str
    version: int
    is_untitled: bool

    def get_text(self) -> str: ...


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives the complete diagnostic set of a document."""

    def set(self, uri: str, diagnostics: "Sequence[PresentedDiagnostic]") -> None: ...

    def delete(self, uri: str) -> None: ...

    def clear(self) -> None: ...


@dataclass
class DocumentSnapshot:
    """Plain TextDocument implementation."""

    uri: str
    text: str
    language_id: str
    version: int = 1
    is_untitled: bool = False

    def get_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @classmethod
    def point(cls, line: int, character: int = 0) -> "Range":
        position = Position(line, character)
        return cls(position, position)


@dataclass(frozen=True)
class TextEdit:
    """Replace ``range`` with ``new_text``; an empty range is an insertion."""

    range: Range
    new_text: str


@dataclass(frozen=True)
class CodeAction:
    """A titled set of edits offered for one diagnostic, or a batch of them.

    Batch actions use a rule id prefix (or ``"*"``) as ``diagnostic_code`` and
    list every rule id they fix in ``covered_codes``.
    """

    title: str
    edits: tuple[TextEdit, ...]
    diagnostic_code: str
    kind: str = "quickfix"
    is_preferred: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)
    covered_codes: tuple[str, ...] = field(default_factory=tuple)
