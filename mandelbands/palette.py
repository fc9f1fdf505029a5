"""Color mapping from escape iteration counts to RGB triples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from matplotlib import colormaps as _mpl_colormaps

RGB = tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)


@dataclass(frozen=True)
class ColorParameters:
    """Per-channel caps used by palettes that scale channels with the iteration count."""

    r: int = 100
    g: int = 100
    b: int = 100


def clamp_u8(value: float) -> int:
    """Truncate toward zero and clamp into ``[0, 255]``."""

    return min(max(int(value), 0), 255)


def _clamp_u8_array(values: np.ndarray) -> np.ndarray:
    return np.clip(np.trunc(values), 0, 255).astype(np.uint8)


def polynomial_color(iteration: int, max_iteration: int, params: Optional[ColorParameters] = None) -> RGB:
    """Default palette: black inside the set, smooth polynomial ramp outside.

    ``params`` is accepted for interface compatibility and ignored.
    """

    if iteration >= max_iteration:
        return BLACK
    t = iteration / max_iteration
    r = clamp_u8(9 * (1 - t) * t * t * t * 255)
    g = clamp_u8(15 * (1 - t) * (1 - t) * t * t * 255)
    b = clamp_u8(8.5 * (1 - t) * (1 - t) * (1 - t) * t * 255)
    return r, g, b


class Palette:
    """A pure ``(iteration, max_iteration, params) -> RGB`` color function.

    Subclasses implement ``__call__`` and may override :meth:`colorize` with a
    vectorised version, which must agree byte for byte with ``__call__``.
    """

    name = "palette"

    def __call__(self, iteration: int, max_iteration: int, params: Optional[ColorParameters] = None) -> RGB:
        raise NotImplementedError

    def colorize(self, iterations: np.ndarray, max_iteration: int, params: Optional[ColorParameters] = None) -> np.ndarray:
        """Color an array of iteration counts, returning ``uint8`` of shape ``iterations.shape + (3,)``."""

        iterations = np.asarray(iterations)
        out = np.empty(iterations.shape + (3,), dtype=np.uint8)
        for index, count in np.ndenumerate(iterations):
            out[index] = self(int(count), max_iteration, params)
        return out


class PolynomialPalette(Palette):
    name = "polynomial"

    def __call__(self, iteration, max_iteration, params=None):
        return polynomial_color(iteration, max_iteration, params)

    def colorize(self, iterations, max_iteration, params=None):
        iterations = np.asarray(iterations)
        t = iterations.astype(np.float64) / np.float64(max_iteration)
        u = 1.0 - t
        out = np.empty(iterations.shape + (3,), dtype=np.uint8)
        out[..., 0] = _clamp_u8_array(9.0 * u * t * t * t * 255.0)
        out[..., 1] = _clamp_u8_array(15.0 * u * u * t * t * 255.0)
        out[..., 2] = _clamp_u8_array(8.5 * u * u * u * t * 255.0)
        out[iterations >= max_iteration] = BLACK
        return out


class ChannelCapPalette(Palette):
    """Scale each channel linearly up to its cap; points inside the set are white.

    The ramp is computed in single precision so truncation matches renders
    made with the original single-precision channel scaling.
    """

    name = "channel-cap"

    def __call__(self, iteration, max_iteration, params=None):
        if iteration >= max_iteration:
            return WHITE
        caps = params if params is not None else ColorParameters()
        scale = np.float32(iteration)
        limit = np.float32(max_iteration)
        return tuple(
            clamp_u8(np.float32(cap % 255) / limit * scale)
            for cap in (caps.r, caps.g, caps.b)
        )


class BinaryPalette(Palette):
    name = "binary"

    def __call__(self, iteration, max_iteration, params=None):
        return WHITE if iteration >= max_iteration else BLACK

    def colorize(self, iterations, max_iteration, params=None):
        inside = np.asarray(iterations) >= max_iteration
        return np.repeat(np.where(inside, 255, 0).astype(np.uint8)[..., np.newaxis], 3, axis=-1)


def parse_hex_color(hex_color: str) -> RGB:
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError('color must be in the form #RRGGBB.')
    try:
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError('color must contain only hexadecimal digits.') from exc


class ColormapPalette(Palette):
    """Sample a matplotlib colormap at ``iteration / max_iteration``."""

    def __init__(self, name: str, inside: Union[str, RGB] = BLACK) -> None:
        try:
            self._cmap = _mpl_colormaps[name]
        except KeyError as exc:
            raise ValueError(f"Unknown colormap '{name}'.") from exc
        self.name = name
        self.inside = parse_hex_color(inside) if isinstance(inside, str) else tuple(inside)
        # Colormaps build their lookup table lazily; do it before workers share the instance.
        self._cmap(0.0)

    def __call__(self, iteration, max_iteration, params=None):
        if iteration >= max_iteration:
            return self.inside
        rgba = self._cmap(iteration / max_iteration)
        return tuple(int(np.uint8(np.clip(channel * 255, 0, 255))) for channel in rgba[:3])

    def colorize(self, iterations, max_iteration, params=None):
        iterations = np.asarray(iterations)
        rgba = np.asarray(self._cmap(iterations.astype(np.float64) / np.float64(max_iteration)))
        out = np.uint8(np.clip(rgba[..., :3] * 255, 0, 255))
        out[iterations >= max_iteration] = self.inside
        return out


POLYNOMIAL = PolynomialPalette()

_BUILTIN_PALETTES = {
    "polynomial": PolynomialPalette,
    "channel-cap": ChannelCapPalette,
    "binary": BinaryPalette,
}


def get_palette(name: str, *, inside: Union[str, RGB] = BLACK) -> Palette:
    """Resolve a built-in palette name or a matplotlib colormap name."""

    key = name.lower()
    if key in _BUILTIN_PALETTES:
        return _BUILTIN_PALETTES[key]()
    return ColormapPalette(name, inside=inside)


def palette_names() -> list[str]:
    return sorted(_BUILTIN_PALETTES)
