"""Public API for multi-threaded Mandelbrot rendering."""

from .engine import RenderResult, WorkBand, escape_counts, partition_rows, render
from .errors import AllocationFailure, Cancelled, InvalidViewport, MandelbrotError, WorkerFault
from .navigation import ParameterEditor, adjust, zoom_in, zoom_out
from .palette import (
    BinaryPalette,
    ChannelCapPalette,
    ColorParameters,
    ColormapPalette,
    Palette,
    PolynomialPalette,
    clamp_u8,
    get_palette,
    polynomial_color,
)
from .viewport import Viewport

__all__ = [
    "AllocationFailure",
    "BinaryPalette",
    "Cancelled",
    "ChannelCapPalette",
    "ColorParameters",
    "ColormapPalette",
    "InvalidViewport",
    "MandelbrotError",
    "Palette",
    "ParameterEditor",
    "PolynomialPalette",
    "RenderResult",
    "Viewport",
    "WorkBand",
    "WorkerFault",
    "adjust",
    "clamp_u8",
    "escape_counts",
    "get_palette",
    "partition_rows",
    "polynomial_color",
    "render",
    "zoom_in",
    "zoom_out",
]
