from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import os

from .fingerprint_cache import DEFAULT_INFO_SUFFIX


def load_dotenv(path: Path) -> None:
    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _normalize_prefix(prefix: str) -> str:
    return prefix if prefix.endswith("/") else f"{prefix}/"


@dataclass(frozen=True)
class SpriteConfig:
    images_path: Path
    url_prefix: str = "/"
    info_suffix: str = DEFAULT_INFO_SUFFIX
    strip_folder: str | None = None
    track_content: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        object.__setattr__(self, "images_path", Path(self.images_path))
        object.__setattr__(self, "url_prefix", _normalize_prefix(self.url_prefix))

    @classmethod
    def from_env(cls, dotenv: Path = Path(".env")) -> "SpriteConfig":
        load_dotenv(dotenv)
        images_path = Path(os.getenv("SPRITE_IMAGES_PATH", "images").strip() or "images")
        url_prefix = os.getenv("SPRITE_URL_PREFIX", "/").strip() or "/"
        info_suffix = os.getenv("SPRITE_INFO_SUFFIX", DEFAULT_INFO_SUFFIX).strip()
        if not info_suffix or "/" in info_suffix:
            raise RuntimeError("SPRITE_INFO_SUFFIX must be a plain file suffix")
        strip_folder = os.getenv("SPRITE_STRIP_FOLDER", "").strip() or None
        if strip_folder and "/" in strip_folder:
            raise RuntimeError("SPRITE_STRIP_FOLDER must be a single folder name")
        track_content = (
            os.getenv("SPRITE_TRACK_CONTENT", "0").strip().lower() in {"1", "true", "yes"}
        )
        log_level = os.getenv("SPRITE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if not isinstance(logging.getLevelName(log_level), int):
            raise RuntimeError(f"Unknown SPRITE_LOG_LEVEL: {log_level}")
        return cls(
            images_path=images_path,
            url_prefix=url_prefix,
            info_suffix=info_suffix,
            strip_folder=strip_folder,
            track_content=track_content,
            log_level=log_level,
        )
