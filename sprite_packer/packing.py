from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .models import UNSET, Offset, PlacedImage


@dataclass
class SheetGroup:
    key: str
    images: list[PlacedImage] = field(default_factory=list)
    width: int = 0
    cursor_y: int = 0
    last_margin_bottom: int = 0

    @property
    def height(self) -> int:
        return self.cursor_y

    @property
    def is_empty(self) -> bool:
        return not self.images

    def append(
        self,
        source_path: str,
        width: int,
        height: int,
        x: Offset = UNSET,
        margin_top: int = 0,
        margin_bottom: int = 0,
    ) -> PlacedImage:
        if width < 0 or height < 0:
            raise ValueError(f"Image size must be 0 or positive, got {width}x{height}")
        if margin_top < 0 or margin_bottom < 0:
            raise ValueError("margins must be 0 or positive")

        if self.is_empty:
            y_offset = 0
        else:
            # Adjacent margins collapse to the larger one, like CSS block margins.
            y_offset = self.cursor_y + max(self.last_margin_bottom, margin_top)

        placed = PlacedImage(
            source_path=source_path,
            width=width,
            height=height,
            x_offset=x,
            y_offset=y_offset,
            margin_top=margin_top,
            margin_bottom=margin_bottom,
        )
        self.cursor_y = placed.bottom
        self.last_margin_bottom = margin_bottom
        self.width = max(self.width, width)
        self.images.append(placed)
        return placed


class PackingEngine:
    def __init__(self) -> None:
        self._groups: dict[str, SheetGroup] = {}

    def append(
        self,
        group_key: str,
        source_path: str,
        width: int,
        height: int,
        x: Offset = UNSET,
        margin_top: int = 0,
        margin_bottom: int = 0,
    ) -> PlacedImage:
        group = self._groups.get(group_key)
        if group is None:
            group = SheetGroup(key=group_key)
            self._groups[group_key] = group
        placed = group.append(source_path, width, height, x, margin_top, margin_bottom)
        logging.debug(
            "Placed %s in %s at y=%s (sheet now %sx%s)",
            source_path,
            group_key,
            placed.y_offset,
            group.width,
            group.height,
        )
        return placed

    def group(self, group_key: str) -> SheetGroup | None:
        return self._groups.get(group_key)

    def groups(self) -> list[SheetGroup]:
        return list(self._groups.values())

    def reset(self) -> None:
        self._groups.clear()
