import os
import sys
import time
import warnings
from argparse import ArgumentParser
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

# Must be set before TensorFlow is first imported to silence its C++ logger.
if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

import numpy as np
import tensorflow as tf

from mandelbands import (
    ColorParameters,
    InvalidViewport,
    MandelbrotError,
    Viewport,
    get_palette,
    render,
)
from mandelbands.log import log, quiet_tensorflow, set_verbose
from mandelbands.palette import palette_names

if _suppress_messages:
    quiet_tensorflow(tf)


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set into a packed RGB buffer using row-band worker threads.')

    parser.add_argument('--real-min', type=float,
                        dest='real_min', help='left edge of the viewport in the complex plane',
                        metavar='REAL_MIN', default=-2.0)

    parser.add_argument('--real-max', type=float,
                        dest='real_max', help='right edge of the viewport in the complex plane',
                        metavar='REAL_MAX', default=1.3)

    parser.add_argument('--imag-min', type=float,
                        dest='imag_min', help='bottom edge of the viewport in the complex plane',
                        metavar='IMAG_MIN', default=-1.2)

    parser.add_argument('--imag-max', type=float,
                        dest='imag_max', help='top edge of the viewport in the complex plane',
                        metavar='IMAG_MAX', default=1.2)

    parser.add_argument('--width', type=int,
                        dest='width', help='number of pixel columns',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='number of pixel rows',
                        metavar='HEIGHT', default=400)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration bound after which a point counts as inside the set',
                        metavar='MAX_ITERATIONS', default=400)

    parser.add_argument('--threads', type=int,
                        dest='threads', help='number of worker threads; reduced to the row count when larger',
                        metavar='THREADS', default=50)

    parser.add_argument('--palette', type=str,
                        dest='palette', help='%s or a matplotlib colormap name' % ', '.join(palette_names()),
                        metavar='PALETTE', default='polynomial')

    parser.add_argument('--inside-color', type=str, default='#000000',
                        help='Hex color for points inside the set when a matplotlib colormap is used.')

    parser.add_argument('--cap-r', type=int, dest='cap_r', default=100, help='red cap for the channel-cap palette')
    parser.add_argument('--cap-g', type=int, dest='cap_g', default=100, help='green cap for the channel-cap palette')
    parser.add_argument('--cap-b', type=int, dest='cap_b', default=100, help='blue cap for the channel-cap palette')

    parser.add_argument('--output', dest='output', type=str,
                        help='Write the raw RGB buffer (3 bytes per pixel, row-major, top row first) to this file.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and thread diagnostics.')

    return parser


def build_viewport(opt, parser: ArgumentParser) -> Viewport:
    viewport = Viewport(
        real_min=opt.real_min,
        real_max=opt.real_max,
        imag_min=opt.imag_min,
        imag_max=opt.imag_max,
        width=opt.width,
        height=opt.height,
        max_iterations=opt.max_iterations,
    )
    try:
        return viewport.validate()
    except InvalidViewport as exc:
        parser.error(str(exc))


def write_buffer(data: bytes, output_path: Path) -> None:
    """Write ``data`` to ``output_path`` through a temporary file so a failed write leaves no partial output."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = output_path.with_name(output_path.name + '.part')
    tmp_path.write_bytes(data)
    tmp_path.replace(output_path)


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    set_verbose(opt.verbose)

    viewport = build_viewport(opt, parser)
    if opt.threads < 1:
        parser.error('--threads must be at least 1.')

    try:
        palette = get_palette(opt.palette, inside=opt.inside_color)
    except ValueError as exc:
        parser.error(str(exc))
    color_params = ColorParameters(r=opt.cap_r, g=opt.cap_g, b=opt.cap_b)

    log("Rendering %dx%d with palette %s" % (viewport.width, viewport.height, palette.name))
    start = time.perf_counter()
    try:
        result = render(viewport, palette, color_params, opt.threads)
    except MandelbrotError as exc:
        print(f"Render failed: {exc}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start

    inside = float(np.mean(result.iterations >= viewport.max_iterations))
    print("{0}x{1} pixels, {2} bytes, {3} threads, {4:.1%} inside, {5:.3f}s".format(
        viewport.width, viewport.height, result.nbytes, result.parallelism, inside, elapsed))

    if opt.output:
        output_path = Path(opt.output).expanduser().resolve()
        write_buffer(result.tobytes(), output_path)
        log("Wrote %s" % output_path)

    return 0


if __name__ == '__main__':
    sys.exit(main())
