import math

EPS = 1e-4

def dot(a,b): return a[0]*b[0] + a[1]*b[1]
def sub(a,b): return (a[0]-b[0], a[1]-b[1])
def add(a,b): return (a[0]+b[0], a[1]+b[1])
def mul(v,s): return (v[0]*s, v[1]*s)
def cross(a,b): return a[0]*b[1] - a[1]*b[0]

def norm(v):
    l = math.hypot(v[0], v[1])
    return (0.0, 0.0) if l==0 else (v[0]/l, v[1]/l)

def rotate(v, angle):
    """Rotate vector v counter-clockwise by angle (radians)."""
    c = math.cos(angle); s = math.sin(angle)
    return (c*v[0] - s*v[1], s*v[0] + c*v[1])

def right_normal(v): return (v[1], -v[0])
def left_normal(v):  return (-v[1], v[0])

def seg_intersection(a1, a2, b1, b2):
    (x1,y1),(x2,y2),(x3,y3),(x4,y4) = a1,a2,b1,b2
    den = (x1-x2)*(y3-y4) - (y1-y2)*(x3-x4)
    if abs(den) < 1e-9:
        return (False, None, None, None)
    t = ((x1-x3)*(y3-y4)-(y1-y3)*(x3-x4)) / den
    u = ((x1-x3)*(y1-y2)-(y1-y3)*(x1-x2)) / den
    if -1e-6 <= t <= 1+1e-6 and -1e-6 <= u <= 1+1e-6:
        Px = x1 + t*(x2-x1); Py = y1 + t*(y2-y1)
        return (True, (Px, Py), t, u)
    return (False, None, None, None)

def segments_cross(a1, a2, b1, b2, tol=1e-4):
    """True when the two segments cross strictly inside both (touching ends do not count)."""
    hit, _, t, u = seg_intersection(a1, a2, b1, b2)
    return bool(hit) and tol < t < 1-tol and tol < u < 1-tol

def seg_aabb(a,b):
    minx, miny = min(a[0],b[0]), min(a[1],b[1])
    maxx, maxy = max(a[0],b[0]), max(a[1],b[1])
    return (minx, miny, maxx-minx, maxy-miny)

def point_aabb(p, pad):
    return (p[0]-pad, p[1]-pad, pad*2, pad*2)

def rect_from_axes(center, tvec, nvec, w_along_t, h_along_n):
    cx, cy = center; tx, ty = tvec; nx, ny = nvec
    hw = w_along_t * 0.5; hh = h_along_n * 0.5
    return [
        (cx - tx*hw - nx*hh, cy - ty*hw - ny*hh),
        (cx + tx*hw - nx*hh, cy + ty*hw - ny*hh),
        (cx + tx*hw + nx*hh, cy + ty*hw + ny*hh),
        (cx - tx*hw + nx*hh, cy - ty*hw + ny*hh),
    ]

def convex_hull(points):
    """Monotone chain hull, counter-clockwise, collinear points dropped."""
    pts = sorted(set((float(x), float(y)) for x, y in points))
    if len(pts) <= 2: return pts
    def turn(o, a, b): return (a[0]-o[0])*(b[1]-o[1]) - (a[1]-o[1])*(b[0]-o[0])
    lower = []
    for p in pts:
        while len(lower) >= 2 and turn(lower[-2], lower[-1], p) <= 0: lower.pop()
        lower.append(p)
    upper = []
    for p in reversed(pts):
        while len(upper) >= 2 and turn(upper[-2], upper[-1], p) <= 0: upper.pop()
        upper.append(p)
    return lower[:-1] + upper[:-1]

def poly_area(poly):
    """Signed shoelace area; positive for counter-clockwise winding."""
    n = len(poly); s = 0.0
    for i in range(n):
        x1,y1 = poly[i]; x2,y2 = poly[(i+1)%n]
        s += x1*y2 - x2*y1
    return s * 0.5

def is_simple_polygon(poly):
    n = len(poly)
    if n < 3: return False
    for i in range(n):
        a1, a2 = poly[i], poly[(i+1)%n]
        for j in range(i+1, n):
            # neighbouring edges share a vertex
            if (j+1)%n == i or (i+1)%n == j: continue
            b1, b2 = poly[j], poly[(j+1)%n]
            hit, _, _, _ = seg_intersection(a1, a2, b1, b2)
            if hit: return False
    return True


class Line:
    """Line through two points; sides are taken looking from a towards b."""
    __slots__ = ("a", "b")

    def __init__(self, a, b):
        self.a = (float(a[0]), float(a[1])); self.b = (float(b[0]), float(b[1]))

    def __repr__(self):
        return f"Line({self.a}, {self.b})"

    def direction(self):
        return sub(self.b, self.a)

    def is_right(self, p):
        return cross(self.direction(), sub(p, self.a)) < 0

    def crossing(self, other):
        """Intersection point of the two infinite lines, or None when parallel."""
        d1 = self.direction(); d2 = other.direction()
        den = cross(d1, d2)
        if abs(den) < 1e-12:
            return None
        t = cross(sub(other.a, self.a), d2) / den
        return add(self.a, mul(d1, t))
