"""Command-line entry point.

Usage:
    godot-rust-helper new ./my_modules ../my_game --targets windows,linux
    godot-rust-helper create MainScene
    godot-rust-helper build --watch
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .builder import build, watch
from .config import Settings, load_settings, resolve_log_level
from .errors import HelperError
from .registry import ModuleRegistry


def _split_targets(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    return [t.strip() for t in raw.split(",") if t.strip()]


def cmd_new(args, settings: Settings) -> int:
    targets = _split_targets(args.targets)
    if targets is None:
        targets = settings.default_targets
    registry = ModuleRegistry.init_workspace(args.destination, args.godot_project_dir, targets)
    manifest = registry.load()
    print(f"Created environment {registry.root} (targets: {', '.join(manifest.targets) or 'none'})")
    return 0


def cmd_create(args, settings: Settings) -> int:
    registry = ModuleRegistry.discover(Path.cwd())
    stub = registry.create_module(args.name)
    print(f"Created module {args.name} at {stub}")
    return 0


def cmd_destroy(args, settings: Settings) -> int:
    registry = ModuleRegistry.discover(Path.cwd())
    removed = registry.destroy_module(args.name)
    print(f"Destroyed module {removed}")
    return 0


def cmd_import(args, settings: Settings) -> int:
    registry = ModuleRegistry.discover(Path.cwd())
    stub = registry.import_module(args.source, args.name)
    print(f"Imported module {args.name} to {stub}")
    return 0


def cmd_build(args, settings: Settings) -> int:
    if args.watch:
        print("Watching src/ for changes (Ctrl+C to stop)")
        watch(Path.cwd(), interval=args.interval, release=args.release, settings=settings)
        return 0
    copied = build(Path.cwd(), release=args.release, settings=settings)
    for dest in copied:
        print(f"  {dest}")
    print("Build complete!")
    return 0


def cmd_list(args, settings: Settings) -> int:
    registry = ModuleRegistry.discover(Path.cwd())
    for status in registry.status():
        mark = "" if status.present else "  (missing source)"
        print(f"{status.name}  {status.source.relative_to(registry.root)}{mark}")
    for orphan in registry.orphans():
        print(f"?  {orphan.relative_to(registry.root)}  (not in manifest)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="godot-rust-helper", description="Manage Rust modules for a Godot project.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="log progress messages")
    sub = p.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="create an environment for a Godot project")
    new.add_argument("destination")
    new.add_argument("godot_project_dir")
    new.add_argument("--targets", help="comma-separated list of windows, linux, osx")
    new.set_defaults(handler=cmd_new)

    create = sub.add_parser("create", help="create a module in the current environment")
    create.add_argument("name")
    create.set_defaults(handler=cmd_create)

    destroy = sub.add_parser("destroy", help="remove a module from the current environment")
    destroy.add_argument("name")
    destroy.set_defaults(handler=cmd_destroy)

    imp = sub.add_parser("import", help="copy a module from another environment")
    imp.add_argument("source", help="path to the other environment")
    imp.add_argument("name")
    imp.set_defaults(handler=cmd_import)

    bld = sub.add_parser("build", help="run cargo build and copy binaries into the Godot project")
    bld.add_argument("--release", action="store_true")
    bld.add_argument("--watch", action="store_true", help="rebuild whenever src/ changes")
    bld.add_argument("--interval", type=float, default=1.0, help="seconds between checks in --watch mode")
    bld.set_defaults(handler=cmd_build)

    lst = sub.add_parser("list", help="list modules of the current environment")
    lst.set_defaults(handler=cmd_list)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    level = logging.INFO if args.verbose else resolve_log_level(settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.handler(args, settings)
    except HelperError as e:
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
