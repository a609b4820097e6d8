"""
Publish the bundled stubs (controllers, routes, views) into an application.

Existing files are never overwritten; an existing target directory needs
confirmation before anything is copied into it.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Callable, List, Optional

from axion.utils.logging import get_logger

log = get_logger(__name__)

STUBS_PACKAGE = "axion"
STUBS_DIR = "stubs"
PUBLISH_DIR = "axion_app"


@dataclass
class PublishResult:
    target: Path
    copied: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    cancelled: bool = False


def copy_directory(source: Path, destination: Path, result: PublishResult) -> None:
    """Recursively copy `source` into `destination`, skipping files that exist."""
    destination.mkdir(mode=0o755, parents=True, exist_ok=True)
    for item in sorted(source.iterdir()):
        if item.name == "__pycache__":
            continue
        target = destination / item.name
        if item.is_dir():
            copy_directory(item, target, result)
        elif target.exists():
            result.skipped.append(target)
            log.info("Skipped existing file", extra={"path": str(target)})
        else:
            shutil.copy2(item, target)
            result.copied.append(target)


def publish(
    base_path: Path,
    confirm: Callable[[str], bool],
    source: Optional[Path] = None,
) -> PublishResult:
    """
    Copy stubs into `<base_path>/axion_app`.

    Parameters
    ----------
    base_path : Path
        Application root.
    confirm : callable
        Asked before publishing into an existing directory; False cancels.
    source : Path | None
        Stub directory override (defaults to the stubs shipped with Axion).
    """
    target = Path(base_path) / PUBLISH_DIR
    result = PublishResult(target=target)

    if target.is_dir() and not confirm(f"The '{target}' folder already exists. Publish into it?"):
        result.cancelled = True
        log.info("Publish cancelled", extra={"target": str(target)})
        return result

    if source is not None:
        copy_directory(Path(source), target, result)
    else:
        with resources.as_file(resources.files(STUBS_PACKAGE).joinpath(STUBS_DIR)) as stubs:
            copy_directory(Path(stubs), target, result)

    log.info(
        "Stubs published",
        extra={"target": str(target), "copied": len(result.copied), "skipped": len(result.skipped)},
    )
    return result


__all__ = ["PUBLISH_DIR", "PublishResult", "copy_directory", "publish"]
