from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from sprite_packer.errors import CacheCorrupt, ImageNotFound
from sprite_packer.fingerprint_cache import ChangeDetectionCache
from sprite_packer.models import SheetDescriptor
from sprite_packer.storage import FileSystemStorage


class FrozenClockStorage(FileSystemStorage):
    """Storage whose files all report the same modification time."""

    def __init__(self, base_dir: Path) -> None:
        super().__init__(base_dir)
        self.now = datetime(2010, 1, 1, 12, 0, tzinfo=timezone.utc)

    def read_mtime(self, relative: str) -> datetime:
        return self.now


@pytest.fixture
def storage(tmp_path: Path) -> FrozenClockStorage:
    for name in ("file1", "file2"):
        (tmp_path / name).write_bytes(name.encode())
    return FrozenClockStorage(tmp_path)


@pytest.fixture
def cache(storage: FrozenClockStorage) -> ChangeDetectionCache:
    return ChangeDetectionCache(storage)


@pytest.fixture
def descriptor() -> SheetDescriptor:
    return SheetDescriptor(info="info", images=("file1", "file2"))


def test_saves_sprite_info_into_a_file(cache, storage, descriptor) -> None:
    cache.remember("the_sprite", descriptor)

    record = storage.base_dir / "the_sprite.sprite_info.yml"
    data = yaml.safe_load(record.read_text(encoding="utf-8"))
    assert data == {
        "info": "info",
        "images": [
            {"file": "file1", "timestamp": "2010-01-01T12:00:00+00:00"},
            {"file": "file2", "timestamp": "2010-01-01T12:00:00+00:00"},
        ],
    }


def test_nested_group_key_creates_folders(cache, storage, descriptor) -> None:
    cache.remember("icons/sprites", descriptor)
    assert (storage.base_dir / "icons" / "sprites.sprite_info.yml").exists()


def test_false_if_nothing_changed(cache, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    assert cache.changed("the sprite", descriptor) is False


def test_true_without_a_record(cache, descriptor) -> None:
    assert cache.changed("the sprite", descriptor) is True
    assert cache.load("the sprite") is None


def test_true_if_info_changed(cache, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    changed = SheetDescriptor(info="changed info", images=descriptor.images)
    assert cache.changed("the sprite", changed) is True


def test_true_if_images_changed(cache, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    assert cache.changed("the sprite", SheetDescriptor(info="info", images=())) is True
    assert cache.changed("the sprite", SheetDescriptor(info="info", images=("file1",))) is True


def test_member_order_alone_is_not_a_change(cache, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    reordered = SheetDescriptor(info="info", images=("file2", "file1"))
    assert cache.changed("the sprite", reordered) is False


def test_true_if_an_image_timestamp_changed(cache, storage, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    storage.now = datetime.now(timezone.utc)
    assert cache.changed("the sprite", descriptor) is True


def test_missing_member_raises_image_not_found(tmp_path: Path) -> None:
    cache = ChangeDetectionCache(FileSystemStorage(tmp_path))
    descriptor = SheetDescriptor(info="x", images=("gone.png",))

    with pytest.raises(ImageNotFound, match="gone.png"):
        cache.remember("g", descriptor)


def test_remember_overwrites_previous_record(cache, storage, descriptor) -> None:
    cache.remember("the sprite", SheetDescriptor(info="old", images=("file1",)))
    cache.remember("the sprite", descriptor)
    assert cache.changed("the sprite", descriptor) is False
    assert cache.load("the sprite").info == "info"


@pytest.mark.parametrize(
    "payload",
    [
        b"info: [unterminated",
        b"- just\n- a list\n",
        b"info: 3\nimages: []\n",
        b"info: x\nimages:\n- file: file1\n",
        b"\xff\xfe",
    ],
)
def test_corrupt_record_forces_regeneration(cache, storage, descriptor, payload) -> None:
    (storage.base_dir / "the sprite.sprite_info.yml").write_bytes(payload)

    with pytest.raises(CacheCorrupt):
        cache.load("the sprite")
    assert cache.changed("the sprite", descriptor) is True


def test_custom_suffix(storage, descriptor) -> None:
    cache = ChangeDetectionCache(storage, info_suffix=".fingerprint")
    cache.remember("sprites", descriptor)
    assert (storage.base_dir / "sprites.fingerprint").exists()


def test_content_tracking_catches_same_timestamp_edits(storage, descriptor) -> None:
    cache = ChangeDetectionCache(storage, track_content=True)
    cache.remember("the sprite", descriptor)
    assert cache.changed("the sprite", descriptor) is False

    (storage.base_dir / "file1").write_bytes(b"edited")
    assert cache.changed("the sprite", descriptor) is True


def test_timestamps_only_by_default(cache, storage, descriptor) -> None:
    cache.remember("the sprite", descriptor)
    (storage.base_dir / "file1").write_bytes(b"edited")
    assert cache.changed("the sprite", descriptor) is False


def test_real_mtime_round_trip(tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"a")
    cache = ChangeDetectionCache(FileSystemStorage(tmp_path))
    descriptor = SheetDescriptor(info="x", images=("a.png",))

    cache.remember("g", descriptor)
    assert cache.changed("g", descriptor) is False
