"""Run `cargo build` for a workspace and copy the binaries into the engine project."""

import logging
import shutil
import subprocess
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import Settings, load_settings
from .errors import BuildFailed, BuildOutputMissing, HelperError
from .manifest import LibraryManifest, ManifestStore, get_default_store
from .paths import PathLike, engine_library_dir, find_workspace_root
from .targets import PLATFORMS, binary_name

logger = logging.getLogger(__name__)


def profile_name(release: bool) -> str:
    return "release" if release else "debug"


def run_cargo(workspace_root: Path, cargo: str = "cargo", release: bool = False) -> None:
    """Run cargo in `workspace_root` and block until it exits."""
    command = [cargo, "build"]
    if release:
        command.append("--release")
    logger.info("Running %s in %s", " ".join(command), workspace_root)
    try:
        completed = subprocess.run(command, cwd=str(workspace_root), check=False)
    except OSError as e:
        raise BuildFailed(f"There was an error building the module: could not run {cargo} ({e})") from e
    if completed.returncode != 0:
        raise BuildFailed(
            f"There was an error building the module: {' '.join(command)} exited with status {completed.returncode}"
        )


def expected_outputs(
    workspace_root: Path, manifest: LibraryManifest, release: bool = False
) -> List[Tuple[Path, Path]]:
    """Return (built binary, engine destination) pairs, one per distinct known target."""
    library = manifest.library_name(workspace_root)
    build_dir = workspace_root / "target" / profile_name(release)
    dest_dir = engine_library_dir(manifest.engine_path, library)
    pairs = []
    for target in dict.fromkeys(manifest.targets):
        if target not in PLATFORMS:
            logger.warning("Skipping unknown target %s", target)
            continue
        filename = binary_name(library, target)
        pairs.append((build_dir / filename, dest_dir / filename))
    return pairs


def build(
    start_dir: PathLike = ".",
    release: bool = False,
    settings: Optional[Settings] = None,
    store: Optional[ManifestStore] = None,
) -> List[Path]:
    """Build the workspace containing `start_dir` and copy its binaries.

    Nothing is copied when cargo fails. Otherwise every binary that was
    produced is copied, and `BuildOutputMissing` then lists the targets
    cargo did not produce. Returns the list of copied destination paths.
    """
    settings = settings or load_settings()
    store = store or get_default_store()
    root = find_workspace_root(start_dir)
    manifest = store.load(root)

    run_cargo(root, settings.cargo, release)

    copied = []
    missing = []
    for built, dest in expected_outputs(root, manifest, release):
        if not built.is_file():
            logger.warning("Build output %s not found", built)
            missing.append(built)
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(built, dest)
        logger.info("Copied %s -> %s", built, dest)
        copied.append(dest)
    if missing:
        raise BuildOutputMissing(missing, copied)
    return copied


def snapshot_sources(workspace_root: Path) -> Dict[str, int]:
    """Map every file under `src/` to its modification time in nanoseconds."""
    src = workspace_root / "src"
    if not src.is_dir():
        return {}
    out = {}
    for p in sorted(src.rglob("*")):
        try:
            if p.is_file():
                out[str(p)] = p.stat().st_mtime_ns
        except OSError:
            # removed between listing and stat
            continue
    return out


def watch(
    start_dir: PathLike = ".",
    interval: float = 1.0,
    release: bool = False,
    settings: Optional[Settings] = None,
    store: Optional[ManifestStore] = None,
    max_builds: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Build once, then rebuild whenever a file under `src/` changes.

    Build errors are logged and watching continues. Runs until interrupted
    or until `max_builds` builds have been attempted; returns that count.
    """
    root = find_workspace_root(start_dir)
    builds = 0
    last: Optional[Dict[str, int]] = None
    try:
        while True:
            current = snapshot_sources(root)
            if current != last:
                last = current
                try:
                    build(root, release=release, settings=settings, store=store)
                except HelperError as e:
                    logger.error("Build failed: %s", e)
                except OSError as e:
                    logger.exception("Copying build output failed: %s", e)
                builds += 1
                stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
                logger.info("[%s] waiting for changes...", stamp)
                if max_builds is not None and builds >= max_builds:
                    break
            sleep(interval)
    except KeyboardInterrupt:
        logger.info("Stopped watching %s", root)
    return builds
