from __future__ import annotations

import math

Point = tuple[float, float]

ORIGIN: Point = (0.0, 0.0)


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def subtract(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def scale(v: Point, factor: float) -> Point:
    return (v[0] * factor, v[1] * factor)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def points_close(a: Point, b: Point, tol: float = 0.01) -> bool:
    return distance(a, b) < tol


def rotate_point(point: Point, origin: Point, angle_deg: float) -> Point:
    """Rotate ``point`` about ``origin`` by ``angle_deg`` degrees.

    Coordinates are Y-down, so a positive angle turns clockwise on screen.
    """

    angle = math.radians(angle_deg)
    c = math.cos(angle)
    s = math.sin(angle)
    tx = point[0] - origin[0]
    ty = point[1] - origin[1]
    return (origin[0] + tx * c - ty * s, origin[1] + tx * s + ty * c)


def rotate_about_origin(point: Point, angle_deg: float) -> Point:
    return rotate_point(point, ORIGIN, angle_deg)
