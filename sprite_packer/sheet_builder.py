from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence
import io

from PIL import Image, UnidentifiedImageError

from .errors import MaterializationError
from .interfaces import SheetMaterializerInterface
from .models import Percentage, PlacedImage


def sheet_x(sheet_width: int, image: PlacedImage) -> int:
    """Horizontal paste position inside the sheet.

    Percentages are laid out the way CSS resolves them, so ``100%`` sits flush
    right. Pixel offsets only shift the element, the image stays at 0.
    """
    if isinstance(image.x_offset, Percentage):
        return int(round((sheet_width - image.width) * image.x_offset.value / 100.0))
    return 0


@dataclass
class PillowSheetMaterializer(SheetMaterializerInterface):
    compress_level: int = 6

    def compose(
        self,
        group_key: str,
        width: int,
        height: int,
        images: Sequence[PlacedImage],
        sources: Mapping[str, bytes],
    ) -> bytes:
        if width <= 0 or height <= 0:
            raise MaterializationError(f"Sheet {group_key} is empty ({width}x{height})")

        sheet = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        for placed in images:
            if placed.width == 0 or placed.height == 0:
                continue
            data = sources.get(placed.source_path)
            if data is None:
                raise MaterializationError(f"No image data for {placed.source_path}")
            try:
                with Image.open(io.BytesIO(data)) as img:
                    tile = img.convert("RGBA")
            except (UnidentifiedImageError, OSError) as exc:
                raise MaterializationError(
                    f"Failed to decode {placed.source_path}: {exc}"
                ) from exc
            if tile.size != (placed.width, placed.height):
                raise MaterializationError(
                    f"{placed.source_path} is {tile.width}x{tile.height}, "
                    f"expected {placed.width}x{placed.height}"
                )
            # Members never overlap, so a plain paste keeps their alpha intact.
            sheet.paste(tile, (sheet_x(width, placed), placed.y_offset))

        out = io.BytesIO()
        try:
            sheet.save(out, format="PNG", optimize=True, compress_level=self.compress_level)
        except (OSError, ValueError) as exc:
            raise MaterializationError(f"Failed to encode {group_key}: {exc}") from exc
        return out.getvalue()
