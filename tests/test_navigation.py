"""Parameter edits between renders."""

import pytest

from mandelbands import ColorParameters, InvalidViewport, ParameterEditor, Viewport, adjust, zoom_in, zoom_out


@pytest.fixture
def viewport():
    return Viewport(real_min=-2.0, real_max=1.3, imag_min=-1.2, imag_max=1.2,
                    width=800, height=400, max_iterations=400)


class TestZoom:
    def test_zoom_in_shrinks_every_bound(self, viewport):
        zoomed = zoom_in(viewport)
        assert zoomed.real_min == pytest.approx(-1.9)
        assert zoomed.real_max == pytest.approx(1.2)
        assert zoomed.imag_min == pytest.approx(-1.1)
        assert zoomed.imag_max == pytest.approx(1.1)
        assert (zoomed.width, zoomed.height, zoomed.max_iterations) == (800, 400, 400)

    def test_zoom_out_grows_every_bound(self, viewport):
        zoomed = zoom_out(viewport, step=0.5)
        assert zoomed.real_min == pytest.approx(-2.5)
        assert zoomed.real_max == pytest.approx(1.8)
        assert zoomed.imag_min == pytest.approx(-1.7)
        assert zoomed.imag_max == pytest.approx(1.7)

    def test_round_trip(self, viewport):
        restored = zoom_out(zoom_in(viewport))
        assert restored.real_min == pytest.approx(viewport.real_min)
        assert restored.imag_max == pytest.approx(viewport.imag_max)

    def test_cannot_zoom_past_an_empty_viewport(self, viewport):
        with pytest.raises(InvalidViewport):
            for _ in range(20):
                viewport = zoom_in(viewport)


def test_adjust_has_zero_floor():
    assert adjust(5, 3) == 8
    assert adjust(1, -1) == 0
    assert adjust(0, -1) == 0


class TestParameterEditor:
    def test_defaults(self):
        editor = ParameterEditor()
        assert editor.selected == "max_iterations"
        assert editor.label() == "maximal iterations 400"

    def test_cycles_forward_through_fields(self):
        editor = ParameterEditor()
        seen = []
        for _ in range(4):
            editor = editor.next_field()
            seen.append(editor.selected)
        assert seen == ["r", "g", "b", "max_iterations"]

    def test_cycles_backward(self):
        editor = ParameterEditor().previous_field()
        assert editor.selected == "b"
        assert editor.label() == "maximal blue 100"

    def test_increment_and_decrement_selected_field(self):
        editor = ParameterEditor().next_field().increment(5)
        assert editor.r == 105
        assert editor.max_iterations == 400
        editor = editor.decrement(200)
        assert editor.r == 0
        assert editor.label() == "maximal red 0"

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            ParameterEditor(selected="alpha")

    def test_apply(self, viewport):
        editor = ParameterEditor(max_iterations=50, r=10, g=20, b=30)
        updated, params = editor.apply(viewport, 320, 200)
        assert (updated.width, updated.height, updated.max_iterations) == (320, 200, 50)
        assert updated.real_min == viewport.real_min
        assert params == ColorParameters(r=10, g=20, b=30)

    def test_apply_with_zero_iterations_is_rejected_by_validation(self, viewport):
        editor = ParameterEditor(max_iterations=1).decrement()
        updated, _ = editor.apply(viewport, 10, 10)
        with pytest.raises(InvalidViewport):
            updated.validate()
