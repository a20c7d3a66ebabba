from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import os
import uuid

from .interfaces import StorageInterface


class FileSystemStorage(StorageInterface):
    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def resolve(self, relative: str) -> Path:
        return self.base_dir / relative

    def exists(self, relative: str) -> bool:
        return self.resolve(relative).is_file()

    def read_mtime(self, relative: str) -> datetime:
        stat = self.resolve(relative).stat()
        seconds, nanos = divmod(stat.st_mtime_ns, 1_000_000_000)
        stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
        return stamp.replace(microsecond=nanos // 1000)

    def read_bytes(self, relative: str) -> bytes:
        return self.resolve(relative).read_bytes()

    def write_bytes(self, relative: str, data: bytes) -> Path:
        path = self.resolve(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)
        return path
