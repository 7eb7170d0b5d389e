# solver/placements.py
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from models import Shape, Step


@dataclass(frozen=True)
class ShapeOrigins:
    """Every legal origin of one shape, as the board cells it would cover.

    Origins are numbered row-major over an ``ax`` × ``ay`` window, so origin
    ``k`` sits at ``(k % ax, k // ax)``.
    """

    shape_id: int
    points: Tuple[int, ...]
    ax: int
    ay: int
    cells: Tuple[Tuple[int, ...], ...]

    @property
    def total(self) -> int:
        return len(self.cells)

    def step(self, origin: int) -> Step:
        return Step(
            original_shape_id=self.shape_id,
            placement_seq=origin,
            placement_x=origin % self.ax,
            placement_y=origin // self.ax,
        )


def shape_origins(shape: Shape, width: int, height: int) -> ShapeOrigins:
    pts = tuple(sorted(shape.points))
    max_x = max((p % width for p in pts), default=0)
    max_y = max((p // width for p in pts), default=0)
    ax = max(0, width - max_x)
    ay = max(0, height - max_y)
    cells: List[Tuple[int, ...]] = []
    for k in range(ax * ay):
        dx, dy = k % ax, k // ax
        cells.append(tuple((p // width + dy) * width + (p % width + dx) for p in pts))
    return ShapeOrigins(shape.id, pts, ax, ay, tuple(cells))


def all_origins(shapes: Sequence[Shape], width: int, height: int) -> List[ShapeOrigins]:
    return [shape_origins(s, width, height) for s in shapes]
