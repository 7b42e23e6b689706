"""Text templates for generated Rust sources and Godot resource files.

All functions here are pure: they take names and target lists and return
the file contents. Writing files is the registry's job.
"""

import re
from typing import Iterable, List, Sequence

from .paths import ENGINE_MODULES_DIR
from .targets import PLATFORMS, binary_name

_UPPER_BOUNDARY = re.compile(r"(?=[A-Z])")

EMPTY_ENTRY_POINT = """#[macro_use]
extern crate gdnative;

fn init(_handle: gdnative::init::InitHandle) {}

godot_gdnative_init!();
godot_nativescript_init!(init);
godot_gdnative_terminate!();
"""

ENTRY_POINT = """#[macro_use]
extern crate gdnative;

{imports}

fn init(handle: gdnative::init::InitHandle) {{
{registrations}
}}

godot_gdnative_init!();
godot_nativescript_init!(init);
godot_gdnative_terminate!();
"""

MODULE_STUB = """#[derive(gdnative::NativeClass)]
#[inherit(gdnative::Node)]
pub struct {name};

#[gdnative::methods]
impl {name} {{
  fn _init(_owner: gdnative::Node) -> Self {{
    {name}
  }}

  #[export]
  fn _ready(&self, _owner: gdnative::Node) {{
    godot_print!("hello, world.");
  }}
}}
"""

CARGO_MANIFEST = """[package]
name = "{library}"
version = "0.1.0"
edition = "2018"

[lib]
crate-type = ["cdylib"]

[dependencies]
gdnative = {{ git = "https://github.com/GodotNativeTools/godot-rust" }}
"""

SCRIPT_RESOURCE = """[gd_resource type="NativeScript" load_steps=2 format=2]

[ext_resource path="{gdnlib}" type="GDNativeLibrary" id=1]

[resource]

resource_name = "{name}"
class_name = "{name}"
library = ExtResource( 1 )
"""

GENERAL_SECTION = (
    "singleton=false",
    "load_once=true",
    'symbol_prefix="godot_"',
    "reloadable=true",
)


def to_snake_case(name: str) -> str:
    """Split before each uppercase letter, join with `_` and lowercase.

    >>> to_snake_case("MainScene")
    'main_scene'
    """
    fragments = [f for f in _UPPER_BOUNDARY.split(name) if f]
    return "_".join(fragments).lower()


def resource_path(library: str, *parts: str) -> str:
    """Return a `res://` path inside the library's engine directory."""
    return "/".join(("res:/", ENGINE_MODULES_DIR, library) + parts)


def render_empty_entry_point() -> str:
    return EMPTY_ENTRY_POINT


def render_entry_point(module_names: Sequence[str]) -> str:
    """Render `src/lib.rs` declaring and registering every module in order.

    Registration lines are joined by line breaks, so the final one carries
    no separator of its own; the closing brace supplies it.
    """
    if not module_names:
        return render_empty_entry_point()
    imports: List[str] = []
    registrations: List[str] = []
    for name in module_names:
        snake = to_snake_case(name)
        imports.append(f"mod {snake};")
        registrations.append(f"  handle.add_class::<{snake}::{name}>();")
    return ENTRY_POINT.format(imports="\n".join(imports), registrations="\n".join(registrations))


def render_module_stub(name: str) -> str:
    return MODULE_STUB.format(name=name)


def render_binding_manifest(library: str, targets: Iterable[str]) -> str:
    """Render the `.gdnlib` file mapping each target to its binary.

    Unknown targets are skipped without error.
    """
    entries: List[str] = []
    dependencies: List[str] = []
    for target in targets:
        platform = PLATFORMS.get(target)
        if platform is None:
            continue
        binary = resource_path(library, binary_name(library, target))
        entries.append(f'{platform.feature}="{binary}"')
        dependencies.append(f"{platform.feature}=[  ]")

    lines = ["[entry]", "", *entries, ""]
    lines += ["[dependencies]", "", *dependencies, ""]
    lines += ["[general]", "", *GENERAL_SECTION, ""]
    return "\n".join(lines)


def render_cargo_manifest(library: str) -> str:
    return CARGO_MANIFEST.format(library=library)


def render_script_resource(library: str, name: str) -> str:
    """Render the `.gdns` NativeScript resource binding `name` to the library."""
    gdnlib = resource_path(library, f"{library}.gdnlib")
    return SCRIPT_RESOURCE.format(gdnlib=gdnlib, name=name)
