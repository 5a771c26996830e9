from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

ERROR_CODE_PATTERN = re.compile(r"[A-Z][0-9]{4}")
_RULE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


def is_error_code(value: str) -> bool:
    return ERROR_CODE_PATTERN.fullmatch(value) is not None


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"


@dataclass(frozen=True)
class Finding:
    severity: Severity
    rule: str
    message: str
    path: str = ""
    line: int = 0
    error_code: str = ""

    def __post_init__(self) -> None:
        if not _RULE_PATTERN.fullmatch(self.rule):
            raise ValueError(f"invalid rule `{self.rule}`: expected UPPER_SNAKE_CASE")
        object.__setattr__(self, "severity", Severity(self.severity))
        object.__setattr__(self, "message", str(self.message).strip())
        object.__setattr__(self, "path", str(self.path))
        object.__setattr__(self, "line", int(self.line or 0))

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def as_dict(self) -> dict[str, object]:
        return {
            "severity": self.severity.value,
            "rule": self.rule,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "error_code": self.error_code,
        }


class Findings:
    """Append-only accumulator threaded through every stage of a run."""

    def __init__(self) -> None:
        self._items: list[Finding] = []

    def add(self, finding: Finding) -> Finding:
        self._items.append(finding)
        return finding

    def error(self, rule: str, message: str, *, path: Path | str = "", line: int = 0, error_code: str = "") -> Finding:
        return self.add(Finding(Severity.ERROR, rule, message, str(path), line, error_code))

    def warn(self, rule: str, message: str, *, path: Path | str = "", line: int = 0, error_code: str = "") -> Finding:
        return self.add(Finding(Severity.WARN, rule, message, str(path), line, error_code))

    @property
    def items(self) -> tuple[Finding, ...]:
        return tuple(self._items)

    @property
    def errors(self) -> tuple[Finding, ...]:
        return tuple(f for f in self._items if f.is_error)

    @property
    def warnings(self) -> tuple[Finding, ...]:
        return tuple(f for f in self._items if not f.is_error)

    @property
    def failed(self) -> bool:
        return any(f.is_error for f in self._items)

    def since(self, mark: int) -> tuple[Finding, ...]:
        return tuple(self._items[mark:])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Finding]:
        return iter(tuple(self._items))


@dataclass(frozen=True)
class Registry:
    codes: tuple[str, ...] = ()
    _members: frozenset[str] = field(default=frozenset(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "codes", tuple(self.codes))
        object.__setattr__(self, "_members", frozenset(self.codes))

    @classmethod
    def from_codes(cls, codes: Iterable[str]) -> "Registry":
        return cls(tuple(codes))

    @property
    def highest(self) -> str | None:
        return max(self.codes) if self.codes else None

    def __contains__(self, code: object) -> bool:
        return code in self._members

    def __len__(self) -> int:
        return len(self.codes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.codes)


@dataclass(frozen=True)
class ExplanationFacts:
    has_code_example: bool = False
    has_valid_negative_test: bool = False
    uses_ignore_marker: bool = False
    no_longer_emitted: bool = False


__all__ = [
    "ERROR_CODE_PATTERN",
    "ExplanationFacts",
    "Finding",
    "Findings",
    "Registry",
    "Severity",
    "is_error_code",
]
