"""Pydantic schemas for runtime validation of conversion configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_IMAGE_EXTENSIONS = (
    "jpg",
    "jpeg",
    "png",
    "gif",
    "webp",
    "tiff",
    "mng",
    "bmp",
)
DEFAULT_ARCHIVE_EXTENSIONS = ("7z", "rar", "zip", "cbr", "cbz", "cb7")
DEFAULT_DELETE_NAMES = (".DS_Store", "Thumbs.db", "desktop.ini", "__MACOSX")
DEFAULT_DELETE_EXTENSIONS = ("url", "nfo", "sfv", "db")
DEFAULT_ALLOWED_NAMES = ("ComicInfo.xml", "ComicEater.json")


def _normalize_extension(value: str) -> str:
    return value.strip().lstrip(".").lower()


class ConversionConfig(BaseModel):
    """Validated configuration for a conversion run."""

    model_config = ConfigDict(extra="forbid")

    junk_patterns: list[str] = Field(default_factory=list)
    delete_names: list[str] = Field(default_factory=lambda: list(DEFAULT_DELETE_NAMES))
    delete_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DELETE_EXTENSIONS)
    )
    allowed_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_NAMES)
    )
    image_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS)
    )
    archive_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ARCHIVE_EXTENSIONS)
    )
    concurrency: int = Field(default=1, ge=1)
    renormalize_packages: bool = False
    package_extension: str = "cbz"
    sidecar_name: str = "ComicEater.json"
    queue_folders: list[Path] = Field(default_factory=list)
    write_metadata: bool = True
    maintenance_folder: Path | None = None

    @field_validator("junk_patterns")
    @classmethod
    def _validate_junk_patterns(cls, value: list[str]) -> list[str]:
        if any(not item.strip() for item in value):
            raise ValueError("junk_patterns cannot contain empty entries.")
        return value

    @field_validator(
        "delete_extensions", "image_extensions", "archive_extensions", mode="after"
    )
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = [_normalize_extension(item) for item in value]
        if any(not item for item in normalized):
            raise ValueError("extension lists cannot contain empty entries.")
        return normalized

    @field_validator("package_extension")
    @classmethod
    def _validate_package_extension(cls, value: str) -> str:
        normalized = _normalize_extension(value)
        if not normalized:
            raise ValueError("package_extension cannot be empty.")
        return normalized

    @field_validator("sidecar_name")
    @classmethod
    def _validate_sidecar_name(cls, value: str) -> str:
        if not value.strip() or "/" in value or "\\" in value:
            raise ValueError("sidecar_name must be a plain file name.")
        return value.strip()
