from __future__ import annotations

import hashlib
import logging

from .config import SpriteConfig
from .errors import ImageNotFound
from .fingerprint_cache import ChangeDetectionCache
from .grouping import GroupKeyResolver, sheet_filename
from .image_reader import ImageMetadataReader, PillowImageCodec
from .interfaces import ImageCodecInterface, SheetMaterializerInterface, StorageInterface
from .models import (
    PlacementRequest,
    PositionReference,
    SheetDescriptor,
    parse_margin,
    parse_offset,
    parse_shift,
)
from .packing import PackingEngine, SheetGroup
from .registry import SheetRegistry
from .sheet_builder import PillowSheetMaterializer
from .storage import FileSystemStorage


class GenerationSession:
    """State for one sprite generation pass.

    Placement requests are answered as the style sheet is evaluated; once
    evaluation is over, ``finalize_all`` writes the sheets whose fingerprint
    changed. Call ``reset`` (or build a new session) before the next pass.
    """

    def __init__(
        self,
        config: SpriteConfig,
        codec: ImageCodecInterface | None = None,
        storage: StorageInterface | None = None,
        materializer: SheetMaterializerInterface | None = None,
        cache: ChangeDetectionCache | None = None,
    ) -> None:
        self.config = config
        self._storage = storage or FileSystemStorage(config.images_path)
        self._materializer = materializer or PillowSheetMaterializer()
        self._cache = cache or ChangeDetectionCache(
            self._storage,
            info_suffix=config.info_suffix,
            track_content=config.track_content,
        )
        self._reader = ImageMetadataReader(codec or PillowImageCodec(), config.images_path)
        self._engine = PackingEngine()
        self._registry = SheetRegistry(
            self._engine,
            self._reader,
            GroupKeyResolver(strip_folder=config.strip_folder),
        )

    @property
    def engine(self) -> PackingEngine:
        return self._engine

    @property
    def registry(self) -> SheetRegistry:
        return self._registry

    def request_placement(
        self,
        source_path: str,
        x: object = None,
        y: object = None,
        margin_top: object = None,
        margin_bottom: object = None,
    ) -> PositionReference:
        top = parse_margin(margin_top, "margin_top")
        # A lone margin applies above and below the image.
        if margin_bottom is None:
            bottom = top
        else:
            bottom = parse_margin(margin_bottom, "margin_bottom")
        request = PlacementRequest(
            source_path=source_path,
            x=parse_offset(x),
            y_shift=parse_shift(y),
            margin_top=top,
            margin_bottom=bottom,
        )
        placement = self._registry.place(request)
        y_position = placement.y_shift - placement.y_offset
        return PositionReference(
            sheet_url=self.sheet_url(placement.group_key),
            x=placement.x_offset,
            y=y_position or None,
        )

    def sprite_image(self, source_path: str, *args: object) -> str:
        return self.request_placement(source_path, *args).css()

    def sheet_url(self, group_key: str) -> str:
        return f"{self.config.url_prefix}{sheet_filename(group_key)}"

    def descriptor(self, group_key: str) -> SheetDescriptor:
        group = self._require_group(group_key)
        layout = [f"{group.width}x{group.height}"]
        for placed in group.images:
            layout.append(
                f"{placed.source_path} {placed.width}x{placed.height} "
                f"{placed.x_offset.css()} {placed.y_offset}"
            )
        info = hashlib.sha1("\n".join(layout).encode("utf-8")).hexdigest()
        return SheetDescriptor(
            info=info,
            images=tuple(placed.source_path for placed in group.images),
        )

    def finalize(self, group_key: str, descriptor: SheetDescriptor | None = None) -> bool:
        group = self._require_group(group_key)
        if descriptor is None:
            descriptor = self.descriptor(group_key)
        sheet_path = sheet_filename(group_key)
        if not self._storage.exists(sheet_path):
            logging.info("Sheet %s is missing", sheet_path)
        elif not self._cache.changed(group_key, descriptor):
            logging.info("Sprite %s is up to date", group_key)
            return False

        sources = {
            placed.source_path: self._read_source(placed.source_path)
            for placed in group.images
            if placed.width and placed.height
        }
        data = self._materializer.compose(
            group_key, group.width, group.height, group.images, sources
        )
        path = self._storage.write_bytes(sheet_path, data)
        self._cache.remember(group_key, descriptor)
        logging.info(
            "Generated %s (%sx%s, %s images)",
            path,
            group.width,
            group.height,
            len(group.images),
        )
        return True

    def finalize_all(self) -> dict[str, bool]:
        return {group.key: self.finalize(group.key) for group in self._engine.groups()}

    def reset(self) -> None:
        self._registry.reset()
        self._engine.reset()
        self._reader.clear()

    def _read_source(self, source_path: str) -> bytes:
        try:
            return self._storage.read_bytes(source_path)
        except FileNotFoundError as exc:
            raise ImageNotFound(f"Image not found: {source_path}") from exc

    def _require_group(self, group_key: str) -> SheetGroup:
        group = self._engine.group(group_key)
        if group is None:
            raise KeyError(f"No images were placed in {group_key}")
        return group
