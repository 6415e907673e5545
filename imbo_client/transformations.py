"""
Image transformations understood by the Imbo server.

Every transformation is an immutable record whose canonical form is
``name`` or ``name:key=value,key=value``. The parameter order of each
transformation is fixed by the server contract and is part of the signed
URL, so the constructors below always emit parameters in that order and
substitute defaults for missing values.

Constructors validate their input before building anything and raise
InvalidArgumentError for malformed values.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .constants import (
    DEFAULT_COLOR,
    DEFAULT_BORDER_WIDTH,
    DEFAULT_BORDER_HEIGHT,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_SEPIA_THRESHOLD,
    DEFAULT_THUMBNAIL_WIDTH,
    DEFAULT_THUMBNAIL_HEIGHT,
    DEFAULT_THUMBNAIL_FIT,
    DEFAULT_WATERMARK_POSITION
)
from .exceptions import InvalidArgumentError

Numeric = Union[int, float, str]

_INTEGER_RE = re.compile(r'^-?\d+$')


@dataclass(frozen=True)
class Transformation:
    """A single named transformation and its ordered parameters."""

    name: str
    params: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgumentError("Transformation name must be provided")

    @property
    def canonical(self) -> str:
        if not self.params:
            return self.name
        return self.name + ':' + ','.join(f"{key}={value}" for key, value in self.params)

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class RawTransformation:
    """A pre-formatted transformation string, used verbatim."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise InvalidArgumentError("Raw transformation must be a non-empty string")

    @property
    def name(self) -> str:
        return self.value.split(':', 1)[0]

    @property
    def canonical(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


def _build(name: str, *params: Tuple[str, object]) -> Transformation:
    """Build a transformation, leaving out parameters whose value is None."""
    return Transformation(
        name,
        tuple((key, str(value)) for key, value in params if value is not None)
    )


def _integer(value, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    raise InvalidArgumentError(f"{field} must be an integer, got {value!r}")


def _optional_integer(value, field: str) -> Optional[int]:
    if value is None:
        return None
    return _integer(value, field)


def _number(value, field: str) -> str:
    """Format a finite number, dropping the decimal part of integral values."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be a number, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise InvalidArgumentError(f"{field} must be a number, got {value!r}")
    if not isinstance(value, float) or not math.isfinite(value):
        raise InvalidArgumentError(f"{field} must be a number, got {value!r}")
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _color(value, field: str, default: Optional[str] = None) -> Optional[str]:
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be a color string, got {value!r}")
    if value.startswith('#'):
        value = value[1:]
    if not value:
        raise InvalidArgumentError(f"{field} cannot be empty")
    return value


def _text(value, field: str, default: Optional[str] = None) -> Optional[str]:
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{field} must be a non-empty string, got {value!r}")
    return value


def raw(value: str) -> RawTransformation:
    return RawTransformation(value)


def auto_rotate() -> Transformation:
    return _build('autoRotate')


def border(color: Optional[str] = None, width: Optional[Numeric] = None,
           height: Optional[Numeric] = None) -> Transformation:
    """Border with the given color (hex, optional '#') and size in pixels."""
    return _build(
        'border',
        ('color', _color(color, 'color', DEFAULT_COLOR)),
        ('width', _integer(DEFAULT_BORDER_WIDTH if width is None else width, 'width')),
        ('height', _integer(DEFAULT_BORDER_HEIGHT if height is None else height, 'height'))
    )


def canvas(width: Numeric, height: Numeric, mode: Optional[str] = None,
           x: Optional[Numeric] = None, y: Optional[Numeric] = None,
           bg: Optional[str] = None) -> Transformation:
    """
    Place the image on a canvas of the given size.

    mode, x, y and bg are only included when given.
    """
    return _build(
        'canvas',
        ('width', _integer(width, 'width')),
        ('height', _integer(height, 'height')),
        ('mode', _text(mode, 'mode')),
        ('x', _optional_integer(x, 'x')),
        ('y', _optional_integer(y, 'y')),
        ('bg', _color(bg, 'bg'))
    )


def compress(level: Optional[Numeric] = None) -> Transformation:
    level = DEFAULT_COMPRESSION_LEVEL if level is None else level
    return _build('compress', ('level', _integer(level, 'level')))


def crop(x: Numeric, y: Numeric, width: Numeric, height: Numeric,
         mode: Optional[str] = None) -> Transformation:
    """Crop a width x height area starting at (x, y)."""
    return _build(
        'crop',
        ('width', _integer(width, 'width')),
        ('height', _integer(height, 'height')),
        ('x', _integer(x, 'x')),
        ('y', _integer(y, 'y')),
        ('mode', _text(mode, 'mode'))
    )


def desaturate() -> Transformation:
    return _build('desaturate')


def flip_horizontally() -> Transformation:
    return _build('flipHorizontally')


def flip_vertically() -> Transformation:
    return _build('flipVertically')


def _size(name: str, width, height) -> Transformation:
    if width is None and height is None:
        raise InvalidArgumentError(f"{name} requires a width and/or a height")
    return _build(
        name,
        ('width', _optional_integer(width, 'width')),
        ('height', _optional_integer(height, 'height'))
    )


def max_size(width: Optional[Numeric] = None,
             height: Optional[Numeric] = None) -> Transformation:
    return _size('maxSize', width, height)


def modulate(brightness: Optional[Numeric] = None, saturation: Optional[Numeric] = None,
             hue: Optional[Numeric] = None) -> Transformation:
    return _build(
        'modulate',
        ('b', _optional_integer(brightness, 'brightness')),
        ('s', _optional_integer(saturation, 'saturation')),
        ('h', _optional_integer(hue, 'hue'))
    )


def progressive() -> Transformation:
    return _build('progressive')


def resize(width: Optional[Numeric] = None,
           height: Optional[Numeric] = None) -> Transformation:
    return _size('resize', width, height)


def rotate(angle: Numeric, bg: Optional[str] = None) -> Transformation:
    """
    Rotate the image.

    Raises:
        InvalidArgumentError: If angle is not a number
    """
    return _build(
        'rotate',
        ('angle', _number(angle, 'angle')),
        ('bg', _color(bg, 'bg', DEFAULT_COLOR))
    )


def sepia(threshold: Optional[Numeric] = None) -> Transformation:
    threshold = DEFAULT_SEPIA_THRESHOLD if threshold is None else threshold
    return _build('sepia', ('threshold', _integer(threshold, 'threshold')))


def strip() -> Transformation:
    return _build('strip')


def thumbnail(width: Optional[Numeric] = None, height: Optional[Numeric] = None,
              fit: Optional[str] = None) -> Transformation:
    return _build(
        'thumbnail',
        ('width', _integer(DEFAULT_THUMBNAIL_WIDTH if width is None else width, 'width')),
        ('height', _integer(DEFAULT_THUMBNAIL_HEIGHT if height is None else height, 'height')),
        ('fit', _text(fit, 'fit', DEFAULT_THUMBNAIL_FIT))
    )


def transpose() -> Transformation:
    return _build('transpose')


def transverse() -> Transformation:
    return _build('transverse')


def watermark(img: Optional[str] = None, width: Optional[Numeric] = None,
              height: Optional[Numeric] = None, position: Optional[str] = None,
              x: Optional[Numeric] = None, y: Optional[Numeric] = None) -> Transformation:
    """
    Apply a watermark image.

    img is the image identifier of the watermark; the server falls back to
    its configured default watermark when it is left out.
    """
    return _build(
        'watermark',
        ('position', _text(position, 'position', DEFAULT_WATERMARK_POSITION)),
        ('x', _integer(0 if x is None else x, 'x')),
        ('y', _integer(0 if y is None else y, 'y')),
        ('img', _text(img, 'img')),
        ('width', _optional_integer(width, 'width')),
        ('height', _optional_integer(height, 'height'))
    )
