"""Read and rewrite the JSON metadata sidecar stored inside a package."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import zipfile
from collections.abc import Iterable, Mapping
from pathlib import Path

from comic_eater.types import JsonValue

logger = logging.getLogger(__name__)


def read_sidecar(package_path: Path, name: str) -> dict[str, JsonValue] | None:
    """Return the parsed sidecar from ``package_path``, if it holds one.

    A sidecar that is not a JSON object is reported and treated as absent.
    """
    with zipfile.ZipFile(package_path) as archive:
        try:
            raw = archive.read(name)
        except KeyError:
            logger.debug('No existing %s in "%s"', name, package_path)
            return None
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning('Existing %s could not be parsed in "%s"', name, package_path)
        return None
    if not isinstance(payload, dict):
        logger.warning('Existing %s in "%s" is not an object', name, package_path)
        return None
    return payload


def merge_history(
    existing: Iterable[Mapping[str, JsonValue]],
    entries: Iterable[Mapping[str, JsonValue]],
) -> list[dict[str, JsonValue]]:
    """Append ``entries`` to ``existing``, skipping ones already recorded.

    Entries are identified by their action and timestamp.
    """
    merged = [dict(entry) for entry in existing]
    seen = {(entry.get("action"), entry.get("timestamp")) for entry in merged}
    for entry in entries:
        key = (entry.get("action"), entry.get("timestamp"))
        if key in seen:
            continue
        seen.add(key)
        merged.append(dict(entry))
    return merged


def write_sidecar(
    package_path: Path, name: str, payload: Mapping[str, JsonValue]
) -> Path:
    """Replace the sidecar in ``package_path`` with ``payload``.

    The package is rebuilt into a temporary file next to it and swapped in
    with :func:`os.replace`; every other entry is copied unchanged.
    """
    encoded = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{package_path.name}.", suffix=".tmp", dir=package_path.parent
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        with (
            zipfile.ZipFile(package_path) as source,
            zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_STORED) as target,
        ):
            for info in source.infolist():
                if info.filename == name:
                    continue
                target.writestr(info, source.read(info))
            target.writestr(name, encoded)
        os.replace(tmp_path, package_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug('Wrote %s into "%s"', name, package_path)
    return package_path
