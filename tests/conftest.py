import os
import sys
from pathlib import Path

import pytest
from PIL import Image

REPO_ROOT = Path(__file__).resolve().parent.parent
if REPO_ROOT.as_posix() not in sys.path:
    sys.path.insert(0, REPO_ROOT.as_posix())

from sprite_packer.config import SpriteConfig  # noqa: E402
from sprite_packer.session import GenerationSession  # noqa: E402


FIXTURE_SIZES = {
    "sprites/10x10.png": (10, 10),
    "sprites/20x20.png": (20, 20),
    "sprites/30x30.png": (30, 30),
    "sprites/150x10.png": (150, 10),
    "other_images/test.png": (10, 10),
    "other_images/more-images/sprites/test.png": (10, 10),
}


def write_png(path: Path, size: tuple[int, int], color=(255, 0, 0, 255)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path)
    return path


def touch_later(path: Path, seconds: int = 10) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    """Folder of solid-colour PNG fixtures, one per entry in FIXTURE_SIZES."""
    root = tmp_path / "images"
    for relative, size in FIXTURE_SIZES.items():
        write_png(root / relative, size)
    return root


@pytest.fixture
def config(images_dir: Path) -> SpriteConfig:
    return SpriteConfig(images_path=images_dir)


@pytest.fixture
def session(config: SpriteConfig) -> GenerationSession:
    return GenerationSession(config)


class FakeCodec:
    """Codec returning canned sizes, for layouts no real PNG can express."""

    def __init__(self, sizes: dict[str, tuple[int, int]]) -> None:
        self.sizes = sizes
        self.calls: list[Path] = []

    def dimensions(self, path: Path) -> tuple[int, int]:
        self.calls.append(path)
        return self.sizes[path.name]
