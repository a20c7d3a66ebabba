from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from .errors import InvalidReference


def split_reference(source_path: str) -> list[str]:
    normalized = source_path.replace("\\", "/")
    return [part for part in normalized.split("/") if part not in {"", "."}]


@dataclass(frozen=True)
class GroupKeyResolver:
    """Derives the sheet a source image belongs to.

    The key is the image's parent directory, so ``sprites/a.png`` lands in
    ``sprites.png``. With ``strip_folder`` set, a trailing directory of that
    name is dropped when something remains above it
    (``icons/sprites/a.png`` -> ``icons``).
    """

    strip_folder: str | None = None

    def __call__(self, source_path: str) -> str:
        parts = split_reference(source_path)
        if len(parts) < 2:
            raise InvalidReference(
                f"{source_path!r} must be inside a folder, e.g. sprites/{source_path}"
            )
        folders = parts[:-1]
        if self.strip_folder and len(folders) > 1 and folders[-1] == self.strip_folder:
            folders = folders[:-1]
        return str(PurePosixPath(*folders))


def sheet_filename(group_key: str) -> str:
    return f"{group_key}.png"
