from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from .models import PlacedImage


class ImageCodecInterface(Protocol):
    def dimensions(self, path: Path) -> tuple[int, int]:
        ...


class StorageInterface(Protocol):
    def resolve(self, relative: str) -> Path:
        ...

    def exists(self, relative: str) -> bool:
        ...

    def read_mtime(self, relative: str) -> datetime:
        ...

    def read_bytes(self, relative: str) -> bytes:
        ...

    def write_bytes(self, relative: str, data: bytes) -> Path:
        ...


class SheetMaterializerInterface(Protocol):
    def compose(
        self,
        group_key: str,
        width: int,
        height: int,
        images: Sequence[PlacedImage],
        sources: Mapping[str, bytes],
    ) -> bytes:
        ...
