from __future__ import annotations


class SpriteError(Exception):
    pass


class InvalidReference(SpriteError, ValueError):
    """Image path has no enclosing directory to derive a sheet from."""


class InvalidOffset(SpriteError, ValueError):
    pass


class ImageNotFound(SpriteError, FileNotFoundError):
    pass


class ImageDecodeError(SpriteError):
    pass


class CacheCorrupt(SpriteError):
    """Persisted sprite info record could not be parsed."""


class MaterializationError(SpriteError):
    pass
