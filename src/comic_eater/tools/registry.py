"""Archive tool registry keyed by :class:`ToolKind`."""

from __future__ import annotations

from comic_eater.errors import ComicEaterError
from comic_eater.tools.base import ArchiveCommand
from comic_eater.tools.builtins import SevenZipCommand, UnrarCommand
from comic_eater.types import ToolKind


class ToolRegistry:
    """Registry for archive command implementations."""

    def __init__(self) -> None:
        self._tools: dict[ToolKind, ArchiveCommand] = {}

    def register(self, tool: ArchiveCommand) -> None:
        """Register a tool under its ``kind``.

        Raises
        ------
        ComicEaterError
            If the object does not declare a :class:`ToolKind`.
        """
        kind = getattr(tool, "kind", None)
        if not isinstance(kind, ToolKind):
            raise ComicEaterError("Archive tool must declare a ToolKind 'kind'.")
        self._tools[kind] = tool

    def get(self, kind: ToolKind) -> ArchiveCommand:
        try:
            return self._tools[kind]
        except KeyError as exc:
            available = ", ".join(tool.value for tool in self.kinds())
            raise ComicEaterError(
                f"Archive tool '{kind.value}' is not registered. Available: {available}"
            ) from exc

    def kinds(self) -> list[ToolKind]:
        """Registered kinds in preference order (enum declaration order)."""
        return [kind for kind in ToolKind if kind in self._tools]

    def ordered(self) -> list[ArchiveCommand]:
        return [self._tools[kind] for kind in self.kinds()]


def create_default_registry() -> ToolRegistry:
    """Create a registry holding ``7z`` and the ``unrar`` fallback."""
    registry = ToolRegistry()
    registry.register(SevenZipCommand())
    registry.register(UnrarCommand())
    return registry
