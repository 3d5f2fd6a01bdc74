"""Minimal-area oriented bounding rectangles and the cut lines drawn through them."""
import math

from geometry import Line, add, convex_hull, dot, left_normal, mul, norm, rect_from_axes, sub

CUT_MIN_PCT = 40
CUT_MAX_PCT = 60


class BoundingRectangle:
    """Oriented rectangle; ``width`` runs along ``axis_u``, ``height`` along ``axis_v``."""

    def __init__(self, center, axis_u, axis_v, width, height):
        self.center = center
        self.axis_u = axis_u; self.axis_v = axis_v
        self.width = width; self.height = height
        self.corners = rect_from_axes(center, axis_u, axis_v, width, height)
        self.cut = None

    def __repr__(self):
        return f"BoundingRectangle(center={self.center}, width={self.width:.3f}, height={self.height:.3f})"

    @property
    def edges(self):
        c = self.corners
        return [(c[i], c[(i+1) % 4]) for i in range(4)]

    def area(self):
        return self.width * self.height

    def aspect_ratio(self):
        long_side = max(self.width, self.height); short_side = min(self.width, self.height)
        if short_side <= 1e-12:
            return math.inf
        return long_side / short_side

    def cut_line(self, rng):
        """Line across the rectangle, perpendicular to its long side, 40-60% along it."""
        t = rng.randrange(CUT_MIN_PCT, CUT_MAX_PCT) / 100.0
        c0, c1, c2, c3 = self.corners
        if self.width >= self.height:
            p = add(c0, mul(sub(c1, c0), t)); q = add(c3, mul(sub(c2, c3), t))
        else:
            p = add(c1, mul(sub(c2, c1), t)); q = add(c0, mul(sub(c3, c0), t))
        self.cut = Line(p, q)
        return self.cut

    def cut_edge(self):
        return None if self.cut is None else (self.cut.a, self.cut.b)


def min_bounding_rectangle(points):
    """Smallest-area rectangle around ``points``.

    The minimum always has a side flush with a convex hull edge, so only
    hull edge directions are tried.
    """
    pts = convex_hull(points)
    n = len(pts)
    best = None
    for i in range(n):
        u = norm(sub(pts[(i+1) % n], pts[i]))
        if u == (0.0, 0.0):
            continue
        rect = _fit(pts, u)
        if best is None or rect.area() < best.area():
            best = rect
    if best is None:
        best = _fit(pts, (1.0, 0.0))
    return best


def _fit(pts, u):
    v = left_normal(u)
    us = [dot(p, u) for p in pts]; vs = [dot(p, v) for p in pts]
    u0, u1 = min(us), max(us); v0, v1 = min(vs), max(vs)
    center = add(mul(u, (u0 + u1) * 0.5), mul(v, (v0 + v1) * 0.5))
    return BoundingRectangle(center, u, v, u1 - u0, v1 - v0)
