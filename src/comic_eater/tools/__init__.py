"""Command-line archive tools behind one capability interface."""

from comic_eater.tools.base import ArchiveCommand
from comic_eater.tools.registry import ToolRegistry, create_default_registry

__all__ = ["ArchiveCommand", "ToolRegistry", "create_default_registry"]
