from __future__ import annotations

from dataclasses import dataclass, field
import re

from .errors import InvalidOffset


_PIXELS_RE = re.compile(r"^(-?\d+)(px)?$")
_PERCENT_RE = re.compile(r"^(-?\d+(?:\.\d+)?)%$")


@dataclass(frozen=True)
class Pixels:
    value: int

    def css(self) -> str:
        if self.value == 0:
            return "0"
        return f"{self.value}px"


@dataclass(frozen=True)
class Percentage:
    value: float

    def css(self) -> str:
        if float(self.value).is_integer():
            return f"{int(self.value)}%"
        return f"{self.value}%"


@dataclass(frozen=True)
class Unset:
    def css(self) -> str:
        return "0"


Offset = Pixels | Percentage | Unset

UNSET = Unset()


def is_default_offset(offset: Offset) -> bool:
    return isinstance(offset, Unset) or (isinstance(offset, Pixels) and offset.value == 0)


def parse_offset(value: object) -> Offset:
    if value is None:
        return UNSET
    if isinstance(value, (Pixels, Percentage, Unset)):
        return value
    if isinstance(value, bool):
        raise InvalidOffset(f"offset must be a length, got {value!r}")
    if isinstance(value, int):
        return Pixels(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidOffset(f"pixel offset must be whole, got {value!r}")
        return Pixels(int(value))
    if not isinstance(value, str):
        raise InvalidOffset(f"offset must be a length, got {value!r}")

    token = value.strip().lower()
    match = _PERCENT_RE.match(token)
    if match:
        return Percentage(float(match.group(1)))
    match = _PIXELS_RE.match(token)
    if match:
        return Pixels(int(match.group(1)))
    raise InvalidOffset(f"offset must be like 5px or 100%, got {value!r}")


def parse_margin(value: object, label: str = "margin") -> int:
    if value is None:
        return 0
    offset = parse_offset(value)
    if isinstance(offset, Unset):
        return 0
    if not isinstance(offset, Pixels):
        raise InvalidOffset(f"{label} must be in pixels")
    if offset.value < 0:
        raise InvalidOffset(f"{label} must be 0 or positive")
    return offset.value


def parse_shift(value: object) -> int:
    offset = parse_offset(value)
    if isinstance(offset, Unset):
        return 0
    if not isinstance(offset, Pixels):
        raise InvalidOffset("y must be in pixels")
    return offset.value


@dataclass(frozen=True)
class PlacementRequest:
    source_path: str
    x: Offset = UNSET
    y_shift: int = 0
    margin_top: int = 0
    margin_bottom: int = 0


@dataclass(frozen=True)
class PlacedImage:
    source_path: str
    width: int
    height: int
    x_offset: Offset
    y_offset: int
    margin_top: int = 0
    margin_bottom: int = 0

    @property
    def bottom(self) -> int:
        return self.y_offset + self.height


@dataclass(frozen=True)
class Placement:
    group_key: str
    x_offset: Offset
    y_offset: int
    y_shift: int = 0


@dataclass(frozen=True)
class PositionReference:
    """Where an image lives inside its sheet, as seen by a style sheet.

    ``y`` is the vertical background shift (already negated), ``None`` when
    no shift is needed.
    """

    sheet_url: str
    x: Offset = UNSET
    y: int | None = None

    def css(self) -> str:
        url = f"url('{self.sheet_url}')"
        if is_default_offset(self.x) and not self.y:
            return url
        return f"{url} {self.x.css()} {Pixels(self.y or 0).css()}"


@dataclass(frozen=True)
class SheetDescriptor:
    info: str
    images: tuple[str, ...] = ()


@dataclass(frozen=True)
class SpriteFingerprint:
    info: str
    image_stamps: dict[str, str] = field(default_factory=dict)
    content_digests: dict[str, str] = field(default_factory=dict)
