import pytest

from models import PuzzleModel, Shape, Step
from replay import (
    ReplaySession,
    apply_step,
    board_after,
    next_highlights,
    step_cells,
    unknown_shape_ids,
)


def _model(grid=(0, 1, 2, 0, 1, 2), shapes=None, goal=1):
    return PuzzleModel(
        width=3,
        height=2,
        grid=grid,
        goal=goal,
        shapes=shapes if shapes is not None else (Shape(0, (0,)), Shape(1, (0, 1, 3))),
        cycle=("a", "b", "c"),
    )


def _step(shape_id, x, y, seq=0):
    return Step(original_shape_id=shape_id, placement_seq=seq, placement_x=x, placement_y=y)


def test_single_step_scenario():
    model = _model(shapes=(Shape(0, (0,)),))
    steps = [_step(0, 0, 0)]

    assert board_after(model, steps, 0) == [1, 1, 2, 0, 1, 2]
    assert next_highlights(steps, 0, model) == set()
    assert next_highlights(steps, -1, model) == {0}


def test_no_steps_applied_returns_original_grid_copy():
    model = _model()
    steps = [_step(1, 0, 0)]
    board = board_after(model, steps, -1)
    assert board == list(model.grid)
    board[0] = 99
    assert model.grid == (0, 1, 2, 0, 1, 2)


def test_prefixes_build_on_each_other():
    model = _model()
    steps = [_step(1, 0, 0), _step(0, 2, 1), _step(1, 1, 0), _step(0, 0, 0)]
    for k in range(len(steps)):
        prev = board_after(model, steps, k - 1)
        expected = apply_step(prev, steps[k], model.shapes, model.width, model.modulus)
        assert board_after(model, steps, k) == expected


def test_rewinding_is_just_a_shorter_prefix():
    model = _model()
    steps = [_step(1, 0, 0), _step(0, 2, 1)]
    forward = board_after(model, steps, 1)
    back = board_after(model, steps, 0)
    assert back == board_after(model, steps[:1], 0)
    assert forward != back
    assert model.grid == (0, 1, 2, 0, 1, 2)


def test_same_step_twice_advances_two_positions_and_wraps():
    model = _model()
    step = _step(1, 0, 0)
    board = board_after(model, [step, step], 1)
    # shape 1 covers cells 0, 1 and 3
    assert board == [2, 0, 2, 2, 1, 2]
    assert all(0 <= v < model.modulus for v in board)


def test_unknown_shape_id_leaves_grid_unchanged():
    model = _model()
    grid = list(model.grid)
    apply_step(grid, _step(99, 0, 0), model.shapes, model.width, model.modulus)
    assert grid == list(model.grid)
    assert next_highlights([_step(0, 0, 0), _step(99, 0, 0)], 0, model) == set()
    assert unknown_shape_ids(model, [_step(99, 0, 0), _step(0, 0, 0), _step(99, 1, 1)]) == [99]


def test_out_of_bounds_points_are_filtered():
    model = _model()
    # origin (1,1): cells 4, 5 and 7 (off the board)
    step = _step(1, 1, 1)
    assert step_cells(step, model.shapes[1], model.width, model.size) == [4, 5]
    assert board_after(model, [step], 0) == [0, 1, 2, 0, 2, 0]
    assert next_highlights([step], -1, model) == {4, 5}


def test_negative_origin_is_filtered_by_index_bounds():
    model = _model()
    step = _step(0, 0, -1)
    assert board_after(model, [step], 0) == list(model.grid)


def test_explicit_modulus_overrides_model():
    model = _model()
    assert board_after(model, [_step(0, 2, 0)], 0, modulus=5) == [0, 1, 3, 0, 1, 2]


def test_up_to_past_the_end_applies_everything():
    model = _model()
    steps = [_step(0, 0, 0)]
    assert board_after(model, steps, 10) == board_after(model, steps, 0)


class TestReplaySession:
    def setup_method(self):
        self.model = _model()
        self.steps = [_step(1, 0, 0), _step(0, 2, 1), _step(0, 2, 0)]
        self.session = ReplaySession(self.model, self.steps)

    def test_starts_before_first_step_with_first_highlight(self):
        frame = self.session.frame()
        assert frame.index == -1
        assert frame.board == list(self.model.grid)
        assert frame.highlights == {0, 1, 3}

    def test_forward_and_back_are_clamped(self):
        assert self.session.back() == -1
        for _ in range(5):
            self.session.forward()
        assert self.session.index == 2
        assert self.session.highlights() == set()
        assert self.session.back() == 1

    def test_toggle_matches_checkbox_behaviour(self):
        assert self.session.toggle(1) == 1      # tick step 2: apply 1 and 2
        assert self.session.toggle(0) == -1     # untick step 1: rewind all
        assert self.session.toggle(2) == 2
        assert self.session.toggle(2) == 1

    def test_display_is_goal_relative(self):
        self.session.goto(-1)
        assert self.session.display() == [1, 0, 2, 1, 0, 2]
        frame = self.session.frame()
        assert frame.display == self.session.display()
        assert frame.as_json()["highlights"] == [0, 1, 3]


@pytest.mark.parametrize("index", [-1, 0, 1, 2])
def test_board_after_is_repeatable(index):
    model = _model()
    steps = [_step(1, 0, 0), _step(0, 2, 1), _step(0, 2, 0)]
    assert board_after(model, steps, index) == board_after(model, steps, index)
