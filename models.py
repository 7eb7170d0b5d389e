from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Shape:
    id: int
    points: Tuple[int, ...]

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "points": list(self.points)}


@dataclass(frozen=True)
class PuzzleModel:
    """Board snapshot handed to the solver and replayed for display.

    ``grid`` is row-major (``y * width + x``) and shape points are offsets in
    the same board-width coordinates.  ``cycle`` lists the shape identifiers
    in cycle order when the model came from a page; payloads from elsewhere
    may leave it empty.
    """

    width: int
    height: int
    grid: Tuple[int, ...]
    goal: int
    shapes: Tuple[Shape, ...] = ()
    cycle: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        # Freeze whatever sequence types the caller handed us.
        object.__setattr__(self, "grid", tuple(int(v) for v in self.grid))
        object.__setattr__(self, "shapes", tuple(self.shapes))
        object.__setattr__(self, "cycle", tuple(self.cycle))
        if len(self.grid) != self.width * self.height:
            raise ValueError(
                f"grid has {len(self.grid)} cells, expected {self.width}×{self.height}"
            )

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def modulus(self) -> int:
        if self.cycle:
            return len(self.cycle)
        return (max(self.grid) + 1) if self.grid else 1

    def shape(self, shape_id: int) -> Optional[Shape]:
        for s in self.shapes:
            if s.id == shape_id:
                return s
        return None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "width": self.width,
            "height": self.height,
            "grid": list(self.grid),
            "goal": self.goal,
            "shapes": [s.to_payload() for s in self.shapes],
        }
        if self.cycle:
            payload["cycle"] = list(self.cycle)
        return payload

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "PuzzleModel":
        shapes = tuple(
            Shape(int(s["id"]), tuple(int(p) for p in s.get("points") or ()))
            for s in data.get("shapes") or ()
        )
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            grid=tuple(int(v) for v in data["grid"]),
            goal=int(data["goal"]),
            shapes=shapes,
            cycle=tuple(str(c) for c in data.get("cycle") or ()),
        )


_STEP_KEYS = {
    "original_shape_id": ("originalShapeId", "original_shape_id"),
    "placement_seq": ("placementSeq", "placement_seq"),
    "placement_x": ("placementX", "placement_x"),
    "placement_y": ("placementY", "placement_y"),
}


@dataclass(frozen=True)
class Step:
    original_shape_id: int
    placement_seq: int
    placement_x: int
    placement_y: int

    def to_payload(self) -> Dict[str, int]:
        return {
            "originalShapeId": self.original_shape_id,
            "placementSeq": self.placement_seq,
            "placementX": self.placement_x,
            "placementY": self.placement_y,
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Step":
        values: Dict[str, int] = {"placement_seq": 0}
        for name, keys in _STEP_KEYS.items():
            for key in keys:
                if key in data:
                    values[name] = int(data[key])
                    break
            if name not in values:
                raise KeyError(f"step payload is missing {name!r}")
        return cls(**values)


def steps_from_payload(items: Optional[Iterable[Mapping[str, Any]]]) -> Tuple[Step, ...]:
    return tuple(Step.from_payload(item) for item in (items or ()))
