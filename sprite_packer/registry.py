from __future__ import annotations

from typing import Callable

from .image_reader import ImageMetadataReader
from .models import Placement, PlacementRequest
from .packing import PackingEngine


class SheetRegistry:
    """Places every distinct source image once per pass."""

    def __init__(
        self,
        engine: PackingEngine,
        reader: ImageMetadataReader,
        resolve_group: Callable[[str], str],
    ) -> None:
        self._engine = engine
        self._reader = reader
        self._resolve_group = resolve_group
        self._placements: dict[str, Placement] = {}

    def place(self, request: PlacementRequest) -> Placement:
        cached = self._placements.get(request.source_path)
        if cached is not None:
            return cached

        group_key = self._resolve_group(request.source_path)
        width, height = self._reader.dimensions(request.source_path)
        placed = self._engine.append(
            group_key,
            request.source_path,
            width,
            height,
            x=request.x,
            margin_top=request.margin_top,
            margin_bottom=request.margin_bottom,
        )
        placement = Placement(
            group_key=group_key,
            x_offset=placed.x_offset,
            y_offset=placed.y_offset,
            y_shift=request.y_shift,
        )
        self._placements[request.source_path] = placement
        return placement

    def reset(self) -> None:
        self._placements.clear()

    def __contains__(self, source_path: object) -> bool:
        return source_path in self._placements

    def __len__(self) -> int:
        return len(self._placements)
