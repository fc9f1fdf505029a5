"""The region of the complex plane that is sampled for a render."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, replace

import numpy as np

from .errors import InvalidViewport


@dataclass(frozen=True)
class Viewport:
    """Complex-plane bounds, output resolution and iteration bound of one render.

    Screen row 0 is mapped to ``imag_max``: the imaginary axis runs opposite to
    the row order of the pixel buffer, which is what image encoders expect.
    """

    real_min: float
    real_max: float
    imag_min: float
    imag_max: float
    width: int
    height: int
    max_iterations: int

    @classmethod
    def from_center(
        cls,
        x_center: float,
        y_center: float,
        x_width: float,
        y_width: float,
        *,
        width: int,
        height: int,
        max_iterations: int,
    ) -> "Viewport":
        x_center = np.float64(x_center)
        y_center = np.float64(y_center)
        half_x = np.float64(x_width) / 2.0
        half_y = np.float64(y_width) / 2.0
        return cls(
            real_min=float(x_center - half_x),
            real_max=float(x_center + half_x),
            imag_min=float(y_center - half_y),
            imag_max=float(y_center + half_y),
            width=width,
            height=height,
            max_iterations=max_iterations,
        )

    def validate(self) -> "Viewport":
        """Raise :class:`InvalidViewport` unless this viewport can be rendered."""

        for name in ("width", "height", "max_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidViewport(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidViewport(f"{name} must be at least 1, got {value}")

        bounds = (self.real_min, self.real_max, self.imag_min, self.imag_max)
        try:
            finite = bool(np.all(np.isfinite(np.asarray(bounds, dtype=np.float64))))
        except (TypeError, ValueError) as exc:
            raise InvalidViewport(f"bounds must be real numbers, got {bounds!r}") from exc
        if not finite:
            raise InvalidViewport(f"bounds must be finite, got {bounds!r}")
        if not self.real_max > self.real_min:
            raise InvalidViewport(
                f"real_max ({self.real_max}) must be greater than real_min ({self.real_min})"
            )
        if not self.imag_max > self.imag_min:
            raise InvalidViewport(
                f"imag_max ({self.imag_max}) must be greater than imag_min ({self.imag_min})"
            )
        return self

    @property
    def real_step(self) -> np.float64:
        if self.width > 1:
            return np.float64((np.float64(self.real_max) - np.float64(self.real_min)) / np.float64(self.width - 1))
        return np.float64(0.0)

    @property
    def imag_step(self) -> np.float64:
        if self.height > 1:
            return np.float64((np.float64(self.imag_max) - np.float64(self.imag_min)) / np.float64(self.height - 1))
        return np.float64(0.0)

    def real_axis(self) -> np.ndarray:
        """Real coordinate of every column."""

        columns = np.arange(self.width, dtype=np.float64)
        return np.float64(self.real_min) + self.real_step * columns

    def imag_axis(self, rows=None) -> np.ndarray:
        """Imaginary coordinate of ``rows`` (all rows by default)."""

        if rows is None:
            rows = np.arange(self.height, dtype=np.float64)
        else:
            rows = np.asarray(rows, dtype=np.float64)
        return np.float64(self.imag_max) - self.imag_step * rows

    def pixel_to_complex(self, x: int, y: int) -> tuple[np.float64, np.float64]:
        real = np.float64(self.real_min) + self.real_step * np.float64(x)
        imag = np.float64(self.imag_max) - self.imag_step * np.float64(y)
        return np.float64(real), np.float64(imag)

    def complex_to_pixel(self, real: float, imag: float) -> tuple[int, int]:
        """Nearest pixel to ``real + imag*i``, clamped into the grid."""

        if self.width > 1:
            x = int(round((np.float64(real) - np.float64(self.real_min)) / self.real_step))
        else:
            x = 0
        if self.height > 1:
            y = int(round((np.float64(self.imag_max) - np.float64(imag)) / self.imag_step))
        else:
            y = 0
        return min(max(x, 0), self.width - 1), min(max(y, 0), self.height - 1)

    def with_resolution(self, width: int, height: int) -> "Viewport":
        return replace(self, width=width, height=height)

    def with_iterations(self, max_iterations: int) -> "Viewport":
        return replace(self, max_iterations=max_iterations)
