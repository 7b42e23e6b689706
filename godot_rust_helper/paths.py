"""Filesystem helpers: existence checks and upward search for marker files."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import NotAWorkspace

MANIFEST_FILE = "godot-rust-helper.json"
ENGINE_MARKER = "project.godot"
ENGINE_MODULES_DIR = "rust-modules"
MAX_HOPS = 10

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class Found:
    """Directory that contains the searched marker."""
    path: Path


@dataclass(frozen=True)
class NotFound:
    """Search exhausted; `path` is the last directory that was tested."""
    path: Path


FindResult = Union[Found, NotFound]


def exists(path: PathLike) -> bool:
    return os.path.exists(path)


def find_upward(start: PathLike, marker: str, max_hops: int = MAX_HOPS) -> FindResult:
    """Walk from `start` toward the root looking for `marker`.

    `start` itself and at most `max_hops` parents are tested. The walk
    also stops at the filesystem root.
    """
    current = Path(start).resolve()
    hops = 0
    while True:
        if (current / marker).exists():
            return Found(current)
        if hops >= max_hops or current.parent == current:
            return NotFound(current)
        current = current.parent
        hops += 1


def find_workspace_root(start: PathLike) -> Path:
    """Return the nearest directory at or above `start` holding a manifest."""
    result = find_upward(start, MANIFEST_FILE)
    if isinstance(result, NotFound):
        raise NotAWorkspace(
            f"No {MANIFEST_FILE} found in {Path(start).resolve()} or its parents; "
            "run this command inside an environment created with `new`"
        )
    return result.path


def is_engine_project(path: PathLike) -> bool:
    return exists(Path(path) / ENGINE_MARKER)


def engine_library_dir(engine_path: PathLike, library: str) -> Path:
    return Path(engine_path) / ENGINE_MODULES_DIR / library
