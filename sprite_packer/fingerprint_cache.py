from __future__ import annotations

import hashlib
import logging

import yaml

from .errors import CacheCorrupt, ImageNotFound
from .interfaces import StorageInterface
from .models import SheetDescriptor, SpriteFingerprint


DEFAULT_INFO_SUFFIX = ".sprite_info.yml"


class ChangeDetectionCache:
    """Keeps a ``<group_key>.sprite_info.yml`` record per sheet.

    The record holds the descriptor info and each member's modification
    time. Edits inside one timestamp tick go unnoticed unless
    ``track_content`` is set, which also stores a SHA-1 per member.
    """

    def __init__(
        self,
        storage: StorageInterface,
        info_suffix: str = DEFAULT_INFO_SUFFIX,
        track_content: bool = False,
    ) -> None:
        self._storage = storage
        self._info_suffix = info_suffix
        self._track_content = track_content

    def record_path(self, group_key: str) -> str:
        return f"{group_key}{self._info_suffix}"

    def fingerprint(self, descriptor: SheetDescriptor) -> SpriteFingerprint:
        stamps: dict[str, str] = {}
        digests: dict[str, str] = {}
        for path in descriptor.images:
            try:
                stamps[path] = self._storage.read_mtime(path).isoformat()
                if self._track_content:
                    digests[path] = hashlib.sha1(self._storage.read_bytes(path)).hexdigest()
            except FileNotFoundError as exc:
                raise ImageNotFound(f"Image not found: {path}") from exc
        return SpriteFingerprint(
            info=descriptor.info,
            image_stamps=stamps,
            content_digests=digests,
        )

    def remember(self, group_key: str, descriptor: SheetDescriptor) -> SpriteFingerprint:
        fingerprint = self.fingerprint(descriptor)
        self._storage.write_bytes(self.record_path(group_key), self._dump(fingerprint))
        logging.debug("Remembered sprite info for %s", group_key)
        return fingerprint

    def load(self, group_key: str) -> SpriteFingerprint | None:
        try:
            raw = self._storage.read_bytes(self.record_path(group_key))
        except FileNotFoundError:
            return None
        return self._parse(raw, group_key)

    def changed(self, group_key: str, descriptor: SheetDescriptor) -> bool:
        try:
            stored = self.load(group_key)
        except CacheCorrupt as exc:
            logging.warning("Ignoring unreadable sprite info for %s: %s", group_key, exc)
            return True
        if stored is None:
            logging.info("No sprite info for %s yet", group_key)
            return True

        fresh = self.fingerprint(descriptor)
        if fresh.info != stored.info:
            logging.info("Sprite %s changed: info differs", group_key)
            return True
        if set(fresh.image_stamps) != set(stored.image_stamps):
            logging.info("Sprite %s changed: member images differ", group_key)
            return True
        for path, stamp in fresh.image_stamps.items():
            if stored.image_stamps[path] != stamp:
                logging.info("Sprite %s changed: %s was modified", group_key, path)
                return True
        if self._track_content:
            for path, digest in fresh.content_digests.items():
                if stored.content_digests.get(path) != digest:
                    logging.info("Sprite %s changed: %s content differs", group_key, path)
                    return True
        return False

    @staticmethod
    def _dump(fingerprint: SpriteFingerprint) -> bytes:
        images = []
        for path, stamp in fingerprint.image_stamps.items():
            entry = {"file": path, "timestamp": stamp}
            digest = fingerprint.content_digests.get(path)
            if digest:
                entry["sha1"] = digest
            images.append(entry)
        payload = {"info": fingerprint.info, "images": images}
        return yaml.safe_dump(payload, sort_keys=False).encode("utf-8")

    @staticmethod
    def _parse(raw: bytes, group_key: str) -> SpriteFingerprint:
        try:
            data = yaml.safe_load(raw.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise CacheCorrupt(f"{group_key}: {exc}") from exc
        if not isinstance(data, dict):
            raise CacheCorrupt(f"{group_key}: expected a mapping")
        info = data.get("info")
        images = data.get("images") or []
        if not isinstance(info, str) or not isinstance(images, list):
            raise CacheCorrupt(f"{group_key}: missing info or images")

        stamps: dict[str, str] = {}
        digests: dict[str, str] = {}
        for entry in images:
            if not isinstance(entry, dict) or "file" not in entry or "timestamp" not in entry:
                raise CacheCorrupt(f"{group_key}: malformed image entry {entry!r}")
            path = str(entry["file"])
            stamps[path] = str(entry["timestamp"])
            if "sha1" in entry:
                digests[path] = str(entry["sha1"])
        return SpriteFingerprint(info=info, image_stamps=stamps, content_digests=digests)
