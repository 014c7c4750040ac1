"""Domain exceptions raised by the conversion saga."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from comic_eater.application.results import SagaResult


class ComicEaterError(Exception):
    """Base class for all library errors."""

    exit_code = 1


class ConfigError(ComicEaterError):
    """Configuration could not be loaded or validated."""

    exit_code = 2


class ValidationError(ComicEaterError):
    """Archive failed integrity testing under every supported tool."""


class ContentError(ComicEaterError):
    """Archive contents are corrupt, empty, or ambiguous after cleaning."""


class StructuralError(ComicEaterError):
    """A saga post-condition was violated by a worker."""


class ExternalToolError(ComicEaterError):
    """An archive command exited non-zero or produced unexpected output.

    Parameters
    ----------
    command : Sequence[str]
        Command line that was executed.
    returncode : int | None
        Process exit status, ``None`` if the binary could not be started.
    output : str, default=""
        Captured stdout/stderr of the process.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None,
        output: str = "",
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output
        detail = output.strip().splitlines()[-1] if output.strip() else "no output"
        super().__init__(
            f"'{' '.join(self.command)}' failed with exit code {returncode}: {detail}"
        )


class SubSagaError(ComicEaterError):
    """A recursive child batch finished with at least one failure.

    The full child result is carried so the executor can splice every child
    outcome into the parent report.
    """

    def __init__(self, message: str, sub_saga_results: SagaResult) -> None:
        if sub_saga_results is None:
            raise TypeError("SubSagaError requires the child SagaResult.")
        super().__init__(message)
        self.sub_saga_results = sub_saga_results
