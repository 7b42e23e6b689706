"""Platform targets and the binary naming rules that go with them."""

from typing import Dict, Iterable, List, NamedTuple, Tuple

from .errors import InvalidTarget


class Platform(NamedTuple):
    feature: str   # Godot feature tag used in gdnlib files
    prefix: str    # shared-object filename prefix produced by cargo
    extension: str


PLATFORMS: Dict[str, Platform] = {
    "windows": Platform("Windows.64", "", ".dll"),
    "linux": Platform("X11.64", "lib", ".so"),
    "osx": Platform("OSX.64", "lib", ".dylib"),
}

VALID_TARGETS = tuple(PLATFORMS)


def parse_target(tag: str) -> str:
    """Return the normalized target tag or raise `InvalidTarget`."""
    normalized = tag.strip().lower()
    if normalized not in PLATFORMS:
        raise InvalidTarget(f"An invalid target was specified: {tag}")
    return normalized


def split_targets(tags: Iterable[str]) -> Tuple[List[str], List[InvalidTarget]]:
    """Partition `tags` into accepted targets and per-item errors, keeping order."""
    valid: List[str] = []
    invalid: List[InvalidTarget] = []
    for tag in tags:
        try:
            valid.append(parse_target(tag))
        except InvalidTarget as e:
            invalid.append(e)
    return valid, invalid


def crate_stem(library: str) -> str:
    # cargo names library artifacts after the crate with dashes replaced
    return library.replace("-", "_")


def binary_name(library: str, target: str) -> str:
    """Filename cargo produces for `library` when building on `target`.

    The `lib` prefix follows the target platform, not the host OS.
    """
    platform = PLATFORMS[target]
    return f"{platform.prefix}{crate_stem(library)}{platform.extension}"
