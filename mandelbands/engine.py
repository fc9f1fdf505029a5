"""Parallel escape-time rendering of Mandelbrot frames."""

from __future__ import annotations

import numbers
import os
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .errors import AllocationFailure, Cancelled, InvalidViewport, WorkerFault
from .log import log
from .palette import POLYNOMIAL, RGB, ColorParameters
from .viewport import Viewport

HORIZON = 4.0
MAX_ITERATIONS_LIMIT = np.iinfo(np.int32).max


@dataclass(frozen=True)
class WorkBand:
    """Half-open row range ``[start_y, end_y)`` owned by exactly one worker."""

    start_y: int
    end_y: int

    @property
    def rows(self) -> int:
        return self.end_y - self.start_y


@dataclass(frozen=True)
class RenderResult:
    """A finished frame.

    ``pixels`` is the packed RGB buffer: ``uint8`` of shape ``(height, width, 3)``,
    C-contiguous, so ``tobytes()`` yields ``width * height * 3`` bytes, top row first.
    """

    pixels: np.ndarray
    iterations: np.ndarray
    viewport: Viewport
    parallelism: int
    bands: tuple[WorkBand, ...]

    @property
    def nbytes(self) -> int:
        return int(self.pixels.nbytes)

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> RGB:
        r, g, b = self.pixels[y, x]
        return int(r), int(g), int(b)

    def iteration(self, x: int, y: int) -> int:
        return int(self.iterations[y, x])


def partition_rows(height: int, parallelism: int) -> tuple[WorkBand, ...]:
    """Split ``[0, height)`` into one contiguous band per worker.

    ``parallelism`` is clamped to ``height`` so every worker owns at least one
    row. All bands hold ``height // parallelism`` rows except the last one,
    which also takes the remainder; with heights that do not divide evenly the
    last worker therefore does more work than the others.
    """

    if isinstance(height, bool) or not isinstance(height, numbers.Integral) or height < 1:
        raise ValueError(f"height must be a positive integer, got {height!r}")
    if isinstance(parallelism, bool) or not isinstance(parallelism, numbers.Integral) or parallelism < 1:
        raise ValueError(f"parallelism must be a positive integer, got {parallelism!r}")

    height = int(height)
    parallelism = int(parallelism)
    if parallelism > height:
        log("reduce thread count to %d" % height)
        parallelism = height

    step = height // parallelism
    bands = [WorkBand(i * step, (i + 1) * step) for i in range(parallelism - 1)]
    bands.append(WorkBand((parallelism - 1) * step, height))
    return tuple(bands)


@tf.function
def _escape_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance ``z <- z*z + c`` for the points that have not escaped yet."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zi * zr + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    horizon = tf.constant(HORIZON, dtype=zr.dtype)
    active = tf.logical_and(active, zr * zr + zi * zi <= horizon)
    return zr, zi, ns, active


@tf.function(
    input_signature=(
        tf.TensorSpec(shape=[None], dtype=tf.float64),
        tf.TensorSpec(shape=[], dtype=tf.float64),
        tf.TensorSpec(shape=[], dtype=tf.int32),
    )
)
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iteration counts for one row of points ``cr + ci*i`` starting from ``z = 0``."""

    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(cr)
    ns = tf.zeros(tf.shape(cr), dtype=tf.int32)
    active = tf.ones(tf.shape(cr), dtype=tf.bool)
    i = tf.constant(0, dtype=tf.int32)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


def escape_counts(real: np.ndarray, imag: float, max_iterations: int, *, device: Optional[str] = None) -> np.ndarray:
    """Escape iteration counts for the points ``real[k] + imag*i``."""

    with tf.device(device if device is not None else "/CPU:0"):
        ns = _escape_run(
            tf.convert_to_tensor(np.asarray(real, dtype=np.float64), dtype=tf.float64),
            tf.constant(imag, dtype=tf.float64),
            tf.constant(max_iterations, dtype=tf.int32),
        )
    return ns.numpy()


def _allocate(viewport: Viewport) -> tuple[np.ndarray, np.ndarray]:
    shape = (viewport.height, viewport.width)
    try:
        pixels = np.zeros(shape + (3,), dtype=np.uint8)
        iterations = np.zeros(shape, dtype=np.int32)
    except (MemoryError, ValueError) as exc:
        raise AllocationFailure(
            "cannot allocate a %dx%d pixel buffer" % (viewport.width, viewport.height)
        ) from exc
    return pixels, iterations


def _render_band(
    band: WorkBand,
    viewport: Viewport,
    color_fn,
    color_params,
    pixels: np.ndarray,
    iterations: np.ndarray,
    stop: threading.Event,
    cancel,
    device: str,
) -> bool:
    """Fill the rows of ``band``; returns False if stopped before finishing."""

    max_iterations = viewport.max_iterations
    colorize = getattr(color_fn, "colorize", None)

    with tf.device(device):
        cr = tf.convert_to_tensor(viewport.real_axis(), dtype=tf.float64)
        limit = tf.constant(max_iterations, dtype=tf.int32)
        for y in range(band.start_y, band.end_y):
            if stop.is_set() or (cancel is not None and cancel.is_set()):
                return False
            ci = tf.constant(viewport.imag_axis((y,))[0], dtype=tf.float64)
            counts = _escape_run(cr, ci, limit).numpy()
            iterations[y] = counts
            if colorize is not None:
                pixels[y] = colorize(counts, max_iterations, color_params)
            else:
                row = pixels[y]
                for x, count in enumerate(counts):
                    row[x] = color_fn(int(count), max_iterations, color_params)
    return True


def render(
    viewport: Viewport,
    color_fn=POLYNOMIAL,
    color_params: Optional[ColorParameters] = None,
    parallelism: Optional[int] = None,
    *,
    max_iterations: Optional[int] = None,
    cancel=None,
    device: Optional[str] = None,
) -> RenderResult:
    """Render ``viewport`` using one worker thread per row band.

    ``color_fn`` is any pure ``(iteration, max_iteration, params) -> (r, g, b)``
    callable; ``color_params`` is handed to it unchanged. ``max_iterations``
    overrides the viewport's bound. ``cancel`` is an optional
    :class:`threading.Event`; setting it makes the render raise
    :class:`Cancelled`. Blocks until every worker has finished.
    """

    if max_iterations is not None:
        viewport = viewport.with_iterations(max_iterations)
    viewport.validate()
    if viewport.max_iterations > MAX_ITERATIONS_LIMIT:
        raise InvalidViewport(
            f"max_iterations must not exceed {MAX_ITERATIONS_LIMIT}, got {viewport.max_iterations}"
        )

    if parallelism is None:
        parallelism = os.cpu_count() or 1
    bands = partition_rows(viewport.height, parallelism)
    pixels, iterations = _allocate(viewport)

    log("Running on %d threads" % len(bands))
    device = device if device is not None else "/CPU:0"
    stop = threading.Event()
    finished = [False] * len(bands)
    faults: list[tuple[WorkBand, BaseException]] = []
    start = time.perf_counter()

    def work(index: int, band: WorkBand) -> None:
        try:
            finished[index] = _render_band(
                band, viewport, color_fn, color_params,
                pixels, iterations, stop, cancel, device,
            )
        except Exception as exc:
            faults.append((band, exc))
            stop.set()

    workers = []
    try:
        for index, band in enumerate(bands):
            worker = threading.Thread(
                target=work, args=(index, band), name="mandelbands-%d" % index, daemon=True
            )
            worker.start()
            workers.append(worker)
    except RuntimeError as exc:
        faults.append((bands[len(workers)], exc))
        stop.set()
    finally:
        for worker in workers:
            worker.join()

    if faults:
        band, exc = faults[0]
        raise WorkerFault(
            "worker for rows [%d, %d) failed: %s" % (band.start_y, band.end_y, exc),
            band=band,
        ) from exc
    if not all(finished):
        raise Cancelled("render cancelled before all bands finished")

    log("Rendered %dx%d (%d iterations) in %.3fs" % (
        viewport.width, viewport.height, viewport.max_iterations, time.perf_counter() - start))

    return RenderResult(
        pixels=pixels,
        iterations=iterations,
        viewport=viewport,
        parallelism=len(bands),
        bands=bands,
    )
