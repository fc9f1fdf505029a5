"""The render.py command line."""

import pytest

import render as render_cli
from mandelbands import Viewport, render


def test_writes_raw_buffer(tmp_path, capsys):
    output = tmp_path / "nested" / "frame.rgb"
    code = render_cli.main([
        "--width", "16", "--height", "8", "--threads", "3",
        "--max-iterations", "40", "--output", str(output),
    ])
    assert code == 0
    data = output.read_bytes()
    assert len(data) == 16 * 8 * 3

    viewport = Viewport(real_min=-2.0, real_max=1.3, imag_min=-1.2, imag_max=1.2,
                        width=16, height=8, max_iterations=40)
    assert data == render(viewport, parallelism=1).tobytes()

    out = capsys.readouterr().out
    assert "16x8 pixels" in out
    assert "3 threads" in out


def test_threads_reduced_to_height(capsys):
    assert render_cli.main(["--width", "4", "--height", "2", "--threads", "50"]) == 0
    assert "2 threads" in capsys.readouterr().out


def test_colormap_palette(tmp_path):
    output = tmp_path / "frame.rgb"
    assert render_cli.main([
        "--width", "6", "--height", "4", "--palette", "viridis",
        "--inside-color", "#ffffff", "--output", str(output),
    ]) == 0
    assert len(output.read_bytes()) == 6 * 4 * 3


@pytest.mark.parametrize("args", [
    ["--width", "0"],
    ["--height", "-2"],
    ["--max-iterations", "0"],
    ["--real-min", "2", "--real-max", "1"],
    ["--threads", "0"],
    ["--palette", "no-such-palette"],
])
def test_invalid_arguments_exit_with_usage_error(args, tmp_path):
    output = tmp_path / "frame.rgb"
    with pytest.raises(SystemExit) as excinfo:
        render_cli.main([*args, "--output", str(output)])
    assert excinfo.value.code == 2
    assert not output.exists()


def test_palette_help_lists_builtin_palettes():
    parser = render_cli.build_parser()
    action = next(action for action in parser._actions if action.dest == "palette")
    for name in ("binary", "channel-cap", "polynomial"):
        assert name in action.help
