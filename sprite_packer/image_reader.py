from __future__ import annotations

from pathlib import Path
import logging

from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError, ImageNotFound
from .interfaces import ImageCodecInterface


class PillowImageCodec(ImageCodecInterface):
    def dimensions(self, path: Path) -> tuple[int, int]:
        try:
            # Image.open only parses the header; pixel data is never loaded.
            with Image.open(path) as img:
                return img.width, img.height
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise ImageNotFound(f"Image not found: {path}") from exc
        except UnidentifiedImageError as exc:
            raise ImageDecodeError(f"Not a decodable image: {path}") from exc
        except OSError as exc:
            raise ImageDecodeError(f"Unable to read image {path}: {exc}") from exc


class ImageMetadataReader:
    def __init__(self, codec: ImageCodecInterface, root: Path) -> None:
        self._codec = codec
        self._root = Path(root)
        self._dimensions: dict[str, tuple[int, int]] = {}

    def dimensions(self, source_path: str) -> tuple[int, int]:
        cached = self._dimensions.get(source_path)
        if cached is not None:
            return cached
        width, height = self._codec.dimensions(self._root / source_path)
        logging.debug("Read %s: %sx%s", source_path, width, height)
        self._dimensions[source_path] = (width, height)
        return width, height

    def clear(self) -> None:
        self._dimensions.clear()
