"""Shared type aliases and enums for conversion modules."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

type JsonScalar = str | int | float | bool | None
type JsonValue = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
type Snapshot = dict[str, JsonValue]


class ContainerKind(Enum):
    """Archive container formats accepted as conversion input."""

    ZIP = "zip"
    RAR = "rar"
    SEVEN_ZIP = "7z"
    PACKAGE = "cbz"

    @classmethod
    def from_path(cls, path: Path) -> ContainerKind | None:
        """Return the container kind for a file suffix, if supported."""
        return _SUFFIX_KINDS.get(path.suffix.lower())

    @property
    def tools(self) -> tuple[ToolKind, ...]:
        """Tools able to read this container, in order of preference."""
        return _CONTAINER_TOOLS[self]


class ToolKind(Enum):
    """Command-line archive tools, in order of preference."""

    SEVEN_ZIP = "7z"
    UNRAR = "unrar"


_SUFFIX_KINDS: dict[str, ContainerKind] = {
    ".zip": ContainerKind.ZIP,
    ".rar": ContainerKind.RAR,
    ".cbr": ContainerKind.RAR,
    ".7z": ContainerKind.SEVEN_ZIP,
    ".cb7": ContainerKind.SEVEN_ZIP,
    ".cbz": ContainerKind.PACKAGE,
}

_CONTAINER_TOOLS: dict[ContainerKind, tuple[ToolKind, ...]] = {
    ContainerKind.ZIP: (ToolKind.SEVEN_ZIP,),
    ContainerKind.RAR: (ToolKind.SEVEN_ZIP, ToolKind.UNRAR),
    ContainerKind.SEVEN_ZIP: (ToolKind.SEVEN_ZIP,),
    ContainerKind.PACKAGE: (ToolKind.SEVEN_ZIP,),
}

# Mis-labeled comic containers and the generic suffix they are renamed to.
GENERIC_SUFFIXES: dict[str, str] = {
    ".cbr": ".rar",
    ".cb7": ".7z",
    ".cbz": ".zip",
}
