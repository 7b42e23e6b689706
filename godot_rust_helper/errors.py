"""Error types raised by workspace and build operations.

Every error is terminal for the operation that raised it, except
`InvalidTarget`, which is reported per item while a workspace is created.
"""


class HelperError(Exception):
    """Base class for all errors surfaced to the CLI."""


class DestinationExists(HelperError):
    """Raised when a new workspace would overwrite an existing path."""


class InvalidEngineProject(HelperError):
    """Raised when the engine project directory has no `project.godot`."""


class NotAWorkspace(HelperError):
    """Raised when no `godot-rust-helper.json` manifest can be found."""


class ManifestInvalid(HelperError):
    """Raised when the manifest cannot be parsed or fails schema validation."""


class InvalidModuleName(HelperError):
    """Raised when a module name is not a usable Rust identifier."""


class DuplicateModule(HelperError):
    """Raised when a module with the same name is already registered."""


class ModuleNotFound(HelperError):
    """Raised when a module is not registered in the workspace."""


class InvalidTarget(HelperError):
    """Raised for a platform tag outside windows/linux/osx."""


class BuildFailed(HelperError):
    """Raised when cargo cannot be started or exits with a non-zero status."""


class BuildOutputMissing(HelperError):
    """Raised when cargo succeeded but an expected binary is absent.

    `copied` holds the destinations that were copied anyway.
    """

    def __init__(self, missing, copied=()):
        self.missing = list(missing)
        self.copied = list(copied)
        listed = ", ".join(str(p) for p in self.missing)
        super().__init__(f"Build output not found: {listed}")
