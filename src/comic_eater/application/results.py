"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from comic_eater.saga.history import HistoryEntry
from comic_eater.types import Snapshot


def _path_or_none(path: Path | None) -> str | None:
    return str(path) if path is not None else None


@dataclass(frozen=True)
class ConversionContext:
    """Unit of work flowing through the conversion saga.

    Every step returns a new value built with :func:`dataclasses.replace`;
    a context is never mutated in place.
    """

    archive_path: Path
    root_path: Path | None = None
    volume_start_path: Path | None = None
    action: str | None = None
    record_change: bool | None = None
    history: tuple[HistoryEntry, ...] = ()
    sub_saga_results: SagaResult | None = None
    unexpected_files: frozenset[str] = frozenset()
    error: BaseException | None = None

    def evolve(self, **changes: object) -> ConversionContext:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def snapshot(self) -> Snapshot:
        """Return a detached, JSON-friendly view of this context.

        ``history``, ``record_change`` and ``sub_saga_results`` are left out so
        ledger entries never nest whole ledgers.
        """
        return {
            "archive_path": str(self.archive_path),
            "root_path": _path_or_none(self.root_path),
            "volume_start_path": _path_or_none(self.volume_start_path),
            "action": self.action,
            "unexpected_files": sorted(self.unexpected_files),
            "error": repr(self.error) if self.error is not None else None,
        }


@dataclass(frozen=True)
class SagaResult:
    """Flattened outcome of one saga run."""

    action: str
    id: int
    successful: tuple[ConversionContext, ...] = field(default=())
    unsuccessful: tuple[ConversionContext, ...] = field(default=())

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.unsuccessful)

    @property
    def failed(self) -> bool:
        return bool(self.unsuccessful)


@dataclass(frozen=True)
class ConversionReport:
    """Outcome of one conversion run, follow-up steps included."""

    conversion: SagaResult
    metadata: SagaResult | None = None
    maintenance: SagaResult | None = None
    removed_dirs: int = 0

    @property
    def failed(self) -> bool:
        return any(
            result is not None and result.failed
            for result in (self.conversion, self.metadata, self.maintenance)
        )
