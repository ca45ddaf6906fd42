"""
Diagnostics collected while processing and emitting the model
"""

import sys
from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    WARNING = "Warning"
    ERROR = "Error"
    FATAL = "Fatal"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    subject: str = ""

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


class FatalGenerationError(RuntimeError):
    """Raised when a category/flag combination reaches an unreachable code path"""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


class Diagnostics:
    """Shared sink for warnings and errors

    Warnings keep a best-effort fallback, errors drop the offending
    declaration, fatal diagnostics stop the run.
    """

    def __init__(self, echo: bool = True, stream=None):
        self.echo = echo
        self.stream = stream
        self.entries: list[Diagnostic] = []

    def _record(self, severity: Severity, message: str, subject: str) -> Diagnostic:
        diagnostic = Diagnostic(severity, message, subject)
        self.entries.append(diagnostic)
        if self.echo:
            print(str(diagnostic), file=self.stream or sys.stderr)
        return diagnostic

    def warning(self, message: str, subject: str = "") -> Diagnostic:
        return self._record(Severity.WARNING, message, subject)

    def error(self, message: str, subject: str = "") -> Diagnostic:
        return self._record(Severity.ERROR, message, subject)

    def fatal(self, message: str, subject: str = ""):
        raise FatalGenerationError(self._record(Severity.FATAL, message, subject))

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == Severity.WARNING]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == Severity.ERROR]

    def clear(self):
        self.entries.clear()

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
