"""Workspace manifest model and its JSON-file store.

The manifest lives at `<workspace>/godot-rust-helper.json`. It is checked
against the bundled JSON Schema before being loaded into a
`LibraryManifest`, and saved by whole-file replacement.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from jsonschema import ValidationError, validate
from pydantic import BaseModel, ConfigDict, Field

from .errors import ManifestInvalid, NotAWorkspace
from .paths import MANIFEST_FILE, PathLike

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "manifest-schema.json"


def load_schema() -> dict:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


class LibraryManifest(BaseModel):
    """In-memory form of `godot-rust-helper.json`.

    `name` and `extensions` are optional because manifests written by older
    releases omit them; absent fields stay absent when saved.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    engine_path: str = Field(alias="godotProjectDir")
    targets: List[str] = Field(default_factory=list)
    modules: List[str] = Field(default_factory=list)
    extensions: Optional[bool] = None

    def library_name(self, workspace_root: PathLike) -> str:
        return self.name or Path(workspace_root).resolve().name

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ManifestStore:
    """Loads and persists the manifest of a workspace directory."""

    def __init__(self, filename: str = MANIFEST_FILE):
        self.filename = filename
        self.schema = load_schema()

    def path_for(self, workspace_root: PathLike) -> Path:
        return Path(workspace_root) / self.filename

    def exists(self, workspace_root: PathLike) -> bool:
        return self.path_for(workspace_root).is_file()

    def load(self, workspace_root: PathLike) -> LibraryManifest:
        path = self.path_for(workspace_root)
        if not path.is_file():
            raise NotAWorkspace(f"{workspace_root} is not an environment created with `new` (no {self.filename})")
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ManifestInvalid(f"{path} is not valid JSON: {e}") from e
        try:
            validate(instance=document, schema=self.schema)
        except ValidationError as e:
            raise ManifestInvalid(f"{path} failed validation: {e.message}") from e
        return LibraryManifest.model_validate(document)

    def save(self, workspace_root: PathLike, manifest: LibraryManifest) -> None:
        """Replace the manifest file with `manifest`.

        The document is written to a temporary file next to the target and
        moved over it, so a reader never sees a partial file.
        """
        path = self.path_for(workspace_root)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.filename}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(manifest.to_document(), fh, indent=2)
                fh.write("\n")
            os.replace(tmp, path)
        except OSError as e:
            logger.exception("Failed writing manifest %s: %s", path, e)
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


def get_default_store() -> ManifestStore:
    return ManifestStore()
