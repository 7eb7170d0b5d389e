import pytest

from models import PuzzleModel, Shape, Step, steps_from_payload


def test_model_freezes_sequences_and_checks_grid_length():
    model = PuzzleModel(width=2, height=1, grid=[0, 1], goal=1, shapes=[Shape(0, (0,))])
    assert model.grid == (0, 1)
    assert isinstance(model.shapes, tuple)
    with pytest.raises(ValueError):
        PuzzleModel(width=2, height=2, grid=[0, 1], goal=0)


def test_modulus_prefers_cycle_length():
    with_cycle = PuzzleModel(2, 1, (0, 0), 0, cycle=("a", "b", "c"))
    without = PuzzleModel(2, 1, (0, 2), 0)
    assert with_cycle.modulus == 3
    assert without.modulus == 3


def test_model_payload_round_trip():
    model = PuzzleModel(3, 1, (0, 1, 2), 2, (Shape(0, (0, 1)),), ("a", "b", "c"))
    payload = model.to_payload()
    assert payload["shapes"] == [{"id": 0, "points": [0, 1]}]
    assert PuzzleModel.from_payload(payload) == model


def test_step_accepts_solver_camel_case():
    step = Step.from_payload({"originalShapeId": 2, "placementX": 1, "placementY": 3, "placementSeq": 7})
    assert step == Step(original_shape_id=2, placement_seq=7, placement_x=1, placement_y=3)
    assert step.to_payload()["placementSeq"] == 7


def test_step_payload_defaults_seq_and_rejects_missing_fields():
    assert steps_from_payload([{"original_shape_id": 0, "placement_x": 0, "placement_y": 0}])[0].placement_seq == 0
    with pytest.raises(KeyError):
        Step.from_payload({"placementX": 1})
    assert steps_from_payload(None) == ()
