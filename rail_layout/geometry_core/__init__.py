from .directions import (
    Direction,
    angle_to_direction,
    direction_to_angle,
    is_cardinal,
    is_intercardinal,
    opposite_direction,
    rotate_direction,
)
from .primitives import (
    ORIGIN,
    Point,
    add,
    distance,
    points_close,
    rotate_about_origin,
    rotate_point,
    scale,
    subtract,
)

__all__ = [
    "ORIGIN",
    "Point",
    "add",
    "subtract",
    "scale",
    "distance",
    "points_close",
    "rotate_point",
    "rotate_about_origin",
    "Direction",
    "direction_to_angle",
    "angle_to_direction",
    "opposite_direction",
    "rotate_direction",
    "is_cardinal",
    "is_intercardinal",
]
