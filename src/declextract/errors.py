# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error taxonomy for the extraction pipeline.

Every error is fatal for the run that raised it; nothing is retried.
"""


class DeclExtractError(RuntimeError):
    """Represent any fatal pipeline failure."""


class ConfigurationError(DeclExtractError):
    """Represent missing, unreadable or invalid configuration."""


class NoTableFilesFound(DeclExtractError):
    """Represent a kernel tree without any syscall table files."""


class TableReadError(DeclExtractError):
    """Represent a discovered syscall table file that cannot be read."""


class ExtractionToolError(DeclExtractError):
    """Represent a failed static-analysis tool invocation or bad tool output."""


class _DiagnosticError(DeclExtractError):
    def __init__(self, message: str, diagnostics: list[str] | None = None) -> None:
        self.diagnostics = list(diagnostics or [])
        text = message
        if self.diagnostics:
            text = message + "\n" + "\n".join(self.diagnostics)
        super().__init__(text)


class ParseFailure(_DiagnosticError):
    """Represent description files that failed to parse.

    Attributes:
        diagnostics: Every positioned parse message collected for the run.
    """


class TypeCheckFailure(_DiagnosticError):
    """Represent descriptions that failed type checking.

    Attributes:
        diagnostics: Every positioned checker message collected for the run.
    """


class PersistenceError(DeclExtractError):
    """Represent a failed write of an output file."""
