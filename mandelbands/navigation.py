"""Parameter updates between renders: zooming the viewport and editing values."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from .palette import ColorParameters
from .viewport import Viewport

ZOOM_STEP = 0.1

FIELDS = ("max_iterations", "r", "g", "b")
_LABELS = {
    "max_iterations": "maximal iterations %d",
    "r": "maximal red %d",
    "g": "maximal green %d",
    "b": "maximal blue %d",
}


def _shift_bounds(viewport: Viewport, delta: float) -> Viewport:
    delta = np.float64(delta)
    return replace(
        viewport,
        real_min=float(np.float64(viewport.real_min) + delta),
        real_max=float(np.float64(viewport.real_max) - delta),
        imag_min=float(np.float64(viewport.imag_min) + delta),
        imag_max=float(np.float64(viewport.imag_max) - delta),
    ).validate()


def zoom_in(viewport: Viewport, step: float = ZOOM_STEP) -> Viewport:
    """Move every bound ``step`` towards the middle of the viewport."""

    return _shift_bounds(viewport, step)


def zoom_out(viewport: Viewport, step: float = ZOOM_STEP) -> Viewport:
    return _shift_bounds(viewport, -step)


def adjust(value: int, delta: int) -> int:
    """Add ``delta`` to ``value`` without going below zero."""

    return max(value + delta, 0)


@dataclass(frozen=True)
class ParameterEditor:
    """Values an interactive controller edits one at a time with up/down keys."""

    max_iterations: int = 400
    r: int = 100
    g: int = 100
    b: int = 100
    selected: str = "max_iterations"

    def __post_init__(self) -> None:
        if self.selected not in FIELDS:
            raise ValueError(f"Unknown field '{self.selected}'. Valid choices: {', '.join(FIELDS)}.")

    @property
    def value(self) -> int:
        return getattr(self, self.selected)

    def next_field(self) -> "ParameterEditor":
        index = FIELDS.index(self.selected)
        return replace(self, selected=FIELDS[(index + 1) % len(FIELDS)])

    def previous_field(self) -> "ParameterEditor":
        index = FIELDS.index(self.selected)
        return replace(self, selected=FIELDS[(index + len(FIELDS) - 1) % len(FIELDS)])

    def increment(self, amount: int = 1) -> "ParameterEditor":
        return replace(self, **{self.selected: adjust(self.value, amount)})

    def decrement(self, amount: int = 1) -> "ParameterEditor":
        return replace(self, **{self.selected: adjust(self.value, -amount)})

    def label(self) -> str:
        return _LABELS[self.selected] % self.value

    def color_parameters(self) -> ColorParameters:
        return ColorParameters(r=self.r, g=self.g, b=self.b)

    def apply(self, viewport: Viewport, width: int, height: int) -> tuple[Viewport, ColorParameters]:
        """Viewport and color parameters for the next render at the given window size.

        The iteration bound may have been edited down to zero; the returned
        viewport is not validated here, ``render`` rejects it.
        """

        updated = replace(viewport, width=width, height=height, max_iterations=self.max_iterations)
        return updated, self.color_parameters()
