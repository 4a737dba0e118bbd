# -*- coding: utf-8 -*-
"""
Diagnostics - Structured compiler messages.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class SourceLocation:
    """1-based line, 0-based column (as reported by compile())."""
    line: int
    column: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """
    One compiler message.

    Attributes:
        severity: ERROR makes the compilation fail
        message: Human-readable text
        location: Position in the generated source, if known
    """
    severity: Severity
    message: str
    location: Optional[SourceLocation] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        where = f"({self.location}) " if self.location else ""
        return f"{self.severity.value}: {where}{self.message}"
