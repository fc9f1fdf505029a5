"""Exceptions raised while rendering Mandelbrot frames."""

from __future__ import annotations

from typing import Optional


class MandelbrotError(Exception):
    """Base class for rendering errors."""


class InvalidViewport(MandelbrotError, ValueError):
    """The viewport cannot be rendered (bad size, bounds or iteration limit)."""


class AllocationFailure(MandelbrotError, MemoryError):
    """The output buffer could not be allocated."""


class WorkerFault(MandelbrotError, RuntimeError):
    """A worker failed while computing its band; the whole render is discarded."""

    def __init__(self, message: str, band: Optional[object] = None) -> None:
        super().__init__(message)
        self.band = band


class Cancelled(MandelbrotError):
    """The render was cancelled before every band finished."""
