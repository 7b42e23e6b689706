"""Module registry: keeps the manifest, generated sources and engine files in step.

A workspace is a Rust library crate created by `ModuleRegistry.init_workspace`.
Each operation below is a sequence of filesystem writes with no rollback:
when a later step fails, earlier writes stay on disk.
"""

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .config import DEFAULT_TARGETS
from .errors import (
    DestinationExists,
    DuplicateModule,
    InvalidEngineProject,
    InvalidModuleName,
    ModuleNotFound,
)
from .manifest import LibraryManifest, ManifestStore, get_default_store
from .paths import PathLike, engine_library_dir, exists, find_workspace_root, is_engine_project
from .targets import split_targets
from .templates import (
    render_binding_manifest,
    render_cargo_manifest,
    render_empty_entry_point,
    render_entry_point,
    render_module_stub,
    render_script_resource,
    to_snake_case,
)

logger = logging.getLogger(__name__)

MODULE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
ENTRY_POINT_FILE = "lib.rs"

# stems that would produce `mod <stem>;` lines rustc rejects, plus the crate root
RESERVED_STEMS = frozenset(
    """
    as async await break const continue crate dyn else enum extern false fn for
    if impl in let loop match mod move mut pub ref return self static struct
    super trait true type unsafe use where while abstract become box do final
    macro override priv try typeof unsized virtual yield lib
    """.split()
)


def validate_module_name(name: str) -> str:
    if not MODULE_NAME_RE.match(name or ""):
        raise InvalidModuleName(
            f"Invalid module name {name!r}: use letters, digits and underscores, starting with a letter"
        )
    if to_snake_case(name) in RESERVED_STEMS:
        raise InvalidModuleName(f"Invalid module name {name!r}: it is a Rust keyword or a reserved file name")
    return name


def same_module(a: str, b: str) -> bool:
    """Return True when two names refer to the same module.

    Names match case-insensitively, and also when they map to the same
    source file (`MainScene` and `main_scene` both live in `main_scene.rs`).
    """
    return a.lower() == b.lower() or to_snake_case(a) == to_snake_case(b)


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)


@dataclass
class ModuleStatus:
    """A registered module and whether its source file is on disk."""
    name: str
    source: Path
    present: bool


class ModuleRegistry:
    """Create, destroy and import modules of one workspace.

    `workspace_root` is the directory holding `godot-rust-helper.json`. Use
    `ModuleRegistry.discover(cwd)` to resolve it from a nested directory.
    """

    def __init__(self, workspace_root: PathLike, store: Optional[ManifestStore] = None):
        self.root = Path(workspace_root).resolve()
        self.store = store or get_default_store()

    @classmethod
    def discover(cls, start: PathLike, store: Optional[ManifestStore] = None) -> "ModuleRegistry":
        return cls(find_workspace_root(start), store)

    @classmethod
    def init_workspace(
        cls,
        destination: PathLike,
        engine_path: PathLike,
        targets: Optional[Iterable[str]] = None,
        store: Optional[ManifestStore] = None,
    ) -> "ModuleRegistry":
        """Create a new workspace at `destination` for the engine project at `engine_path`.

        Invalid targets are logged and dropped; the remaining ones are kept.
        Both preconditions are checked before anything is written.
        """
        destination = Path(destination)
        if exists(destination):
            raise DestinationExists(
                f"The destination folder {destination} already exists, please choose another destination"
            )
        if not is_engine_project(engine_path):
            raise InvalidEngineProject(f"The godot project dir {engine_path} is not valid (no project.godot)")

        requested = [DEFAULT_TARGETS] if targets is None else list(targets)
        valid, invalid = split_targets(requested)
        for err in invalid:
            logger.warning("%s", err)

        engine_root = Path(engine_path).resolve()
        library = destination.resolve().name
        (destination / "src").mkdir(parents=True)
        lib_dir = engine_library_dir(engine_root, library)
        lib_dir.mkdir(parents=True, exist_ok=True)

        registry = cls(destination, store)
        manifest = LibraryManifest(name=library, engine_path=str(engine_root), targets=valid, modules=[])
        registry.store.save(registry.root, manifest)
        _write_text(registry.root / "Cargo.toml", render_cargo_manifest(library))
        _write_text(registry.entry_point_path(), render_empty_entry_point())
        _write_text(registry.binding_manifest_path(manifest), render_binding_manifest(library, valid))
        logger.info("Created workspace %s for %s (targets=%s)", registry.root, engine_root, valid)
        return registry

    # -- paths -------------------------------------------------------------

    def load(self) -> LibraryManifest:
        return self.store.load(self.root)

    def library_name(self, manifest: LibraryManifest) -> str:
        return manifest.library_name(self.root)

    def entry_point_path(self) -> Path:
        return self.root / "src" / ENTRY_POINT_FILE

    def stub_path(self, name: str) -> Path:
        return self.root / "src" / f"{to_snake_case(name)}.rs"

    def engine_dir(self, manifest: LibraryManifest) -> Path:
        return engine_library_dir(manifest.engine_path, self.library_name(manifest))

    def binding_manifest_path(self, manifest: LibraryManifest) -> Path:
        library = self.library_name(manifest)
        return self.engine_dir(manifest) / f"{library}.gdnlib"

    def module_engine_dir(self, manifest: LibraryManifest, name: str) -> Path:
        return self.engine_dir(manifest) / to_snake_case(name)

    def script_resource_path(self, manifest: LibraryManifest, name: str) -> Path:
        snake = to_snake_case(name)
        return self.module_engine_dir(manifest, name) / f"{snake}.gdns"

    # -- queries -----------------------------------------------------------

    def lookup(self, manifest: LibraryManifest, name: str) -> Optional[str]:
        """Return the stored spelling of `name`, or None if it is not registered."""
        for module in manifest.modules:
            if same_module(module, name):
                return module
        return None

    def modules(self) -> List[str]:
        return list(self.load().modules)

    def status(self) -> List[ModuleStatus]:
        out = []
        for name in self.load().modules:
            source = self.stub_path(name)
            out.append(ModuleStatus(name=name, source=source, present=source.is_file()))
        return out

    def orphans(self) -> List[Path]:
        """Return module source files in `src/` that the manifest does not list."""
        registered = {to_snake_case(name) for name in self.load().modules}
        src = self.root / "src"
        if not src.is_dir():
            return []
        return [
            p for p in sorted(src.glob("*.rs"))
            if p.name != ENTRY_POINT_FILE and p.stem not in registered
        ]

    # -- operations --------------------------------------------------------

    def create_module(self, name: str) -> Path:
        """Register `name`, write its stub and publish it to the engine project."""
        manifest = self.load()
        validate_module_name(name)
        existing = self.lookup(manifest, name)
        if existing is not None:
            raise DuplicateModule(f"A module with the same name already exists: {existing}")
        stub = self.stub_path(name)
        if stub.exists():
            raise DuplicateModule(f"A module source file already exists: {stub}")

        manifest.modules.append(name)
        self.store.save(self.root, manifest)
        self._write_entry_point(manifest)
        _write_text(stub, render_module_stub(name))
        self._publish(manifest, name)
        logger.info("Created module %s in %s", name, self.root)
        return stub

    def destroy_module(self, name: str) -> str:
        """Unregister `name` and delete its stub and engine-side directory."""
        manifest = self.load()
        stored = self.lookup(manifest, name)
        if stored is None:
            raise ModuleNotFound(f"The module to delete does not exist: {name}")

        manifest.modules = [m for m in manifest.modules if m != stored]
        self.store.save(self.root, manifest)
        self._write_entry_point(manifest)

        stub = self.stub_path(stored)
        if stub.exists():
            stub.unlink()
        else:
            logger.warning("Module source %s was already missing", stub)
        engine_dir = self.module_engine_dir(manifest, stored)
        if engine_dir.exists():
            shutil.rmtree(engine_dir)
        logger.info("Destroyed module %s in %s", stored, self.root)
        return stored

    def import_module(self, source_workspace: PathLike, name: str) -> Path:
        """Copy module `name` from another workspace into this one.

        The source file is copied byte-for-byte; references inside it are
        not rewritten.
        """
        manifest = self.load()
        source = ModuleRegistry(source_workspace, self.store)
        source_manifest = source.load()
        stored = source.lookup(source_manifest, name)
        if stored is None:
            raise ModuleNotFound(f"Module {name} does not exist in {source.root}")
        source_stub = source.stub_path(stored)
        if not source_stub.is_file():
            raise ModuleNotFound(f"Module {stored} is registered in {source.root} but {source_stub} is missing")

        existing = self.lookup(manifest, stored)
        if existing is not None:
            raise DuplicateModule(f"A module with the same name already exists: {existing}")
        stub = self.stub_path(stored)
        if stub.exists():
            raise DuplicateModule(f"A module source file already exists: {stub}")

        manifest.modules.append(stored)
        self.store.save(self.root, manifest)
        stub.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source_stub, stub)
        self._write_entry_point(manifest)
        self._publish(manifest, stored)
        logger.info("Imported module %s from %s into %s", stored, source.root, self.root)
        return stub

    # -- helpers -----------------------------------------------------------

    def _write_entry_point(self, manifest: LibraryManifest) -> None:
        _write_text(self.entry_point_path(), render_entry_point(manifest.modules))

    def _publish(self, manifest: LibraryManifest, name: str) -> None:
        library = self.library_name(manifest)
        _write_text(self.script_resource_path(manifest, name), render_script_resource(library, name))
        _write_text(self.binding_manifest_path(manifest), render_binding_manifest(library, manifest.targets))
