"""Queue-driven road growth for the major and minor road tiers.

``grow()`` is the engine: it pops candidate segments in FIFO order, lets a
policy veto or adjust them, commits the survivors to a graph tier and asks
the policy for follow-up candidates.  ``MajorRoads`` and ``MinorRoads`` are
the two policies; both share the helpers on ``RoadGrower``.
"""
import math
from collections import deque

from loguru import logger

from geometry import norm, rotate, right_normal, left_normal, seg_aabb, point_aabb, segments_cross
from graph import Graph, Node
from quadtree import Quadtree

SNAP_FACTOR = 0.8      # snap radius as a share of the road length
EDGE_MARGIN = 2        # map units counted as "at the map edge"
MAX_DEGREE = 4


class Segment:
    __slots__ = ("frm", "to", "lean_left", "lean_right", "end_segment")

    def __init__(self, frm, to):
        self.frm = frm; self.to = to
        self.lean_left = False; self.lean_right = False
        self.end_segment = False

    def __repr__(self):
        return f"Segment({self.frm!r} -> {self.to!r})"

    def direction(self):
        return (self.to.x - self.frm.x, self.to.y - self.frm.y)

    def aabb(self):
        return seg_aabb(self.frm.pos, self.to.pos)

    def shares_end_with(self, other):
        for p in (self.frm, self.to):
            for q in (other.frm, other.to):
                if p is q or p.same_spot(q): return True
        return False

    def is_crossing(self, other):
        if self.shares_end_with(other):
            return False
        return segments_cross(self.frm.pos, self.to.pos, other.frm.pos, other.to.pos)


class RoadGrower:
    """Run state of one growth pass plus the rules both policies share."""

    def __init__(self, rng, tier, border, max_segments,
                 max_angle, branch_prob, lean_prob, road_length=10,
                 qt_max_objects=None, qt_max_levels=None):
        self.rng = rng
        self.tier = tier
        self.border = border
        self.max_segments = int(max_segments)
        self.max_angle = max_angle
        self.branch_prob = branch_prob
        self.lean_prob = lean_prob
        self.road_length = road_length
        self.queue = deque()
        self.segments = []
        self.goals = []
        self.index = make_segment_index(border, qt_max_objects, qt_max_levels)

    @property
    def snap_radius(self):
        return self.road_length * SNAP_FACTOR

    def at_capacity(self):
        return len(self.segments) >= self.max_segments

    # -------- segment construction --------
    def new_segment(self, frm, dirv):
        dx, dy = norm(dirv)
        return Segment(frm, Node(frm.x + dx*self.road_length, frm.y + dy*self.road_length))

    def random_angle(self, a, b):
        """Whole-degree angle in [min(a,b), max(a,b)), returned in radians."""
        if b < a: a, b = b, a
        span = b - a
        return math.radians((self.rng.randrange(span) if span > 0 else 0) + a)

    def keep_lean(self):
        return self.rng.random() < self.lean_prob

    def branch(self, seg):
        dirv = seg.direction()
        max_int = int(round(3 / self.branch_prob))
        pick = self.rng.randrange(0, max_int)
        if pick in (1, 3):
            self.goals.append(self.new_segment(seg.to, right_normal(dirv)))
        if pick in (2, 3):
            self.goals.append(self.new_segment(seg.to, left_normal(dirv)))

    def continuing_segment(self, seg):
        dirv = seg.direction()
        max_angle = int(self.max_angle)
        if self.keep_lean():
            angle = self.random_angle(-2, max_angle * 2)
            nxt = self.new_segment(seg.to, rotate(dirv, angle))
            nxt.lean_left = angle > 0; nxt.lean_right = angle < 0
            return nxt
        if seg.lean_left:
            nxt = self.new_segment(seg.to, rotate(dirv, self.random_angle(2, max_angle)))
            nxt.lean_left = True
            return nxt
        if seg.lean_right:
            nxt = self.new_segment(seg.to, rotate(dirv, self.random_angle(-2, -max_angle)))
            nxt.lean_right = True
            return nxt
        return self.new_segment(seg.to, dirv)

    def expand(self, seg):
        """Queue a continuation and possibly branches, unless ``seg`` ended on a node."""
        if seg.end_segment:
            return
        self.goals.clear()
        self.branch(seg)
        self.goals.append(self.continuing_segment(seg))
        self.queue.extend(self.goals)

    # -------- checks --------
    def outside(self, node):
        b = self.border
        return node.x > b or node.x < -b or node.y > b or node.y < -b

    def shared_constraints(self, seg):
        if self.outside(seg.frm) or self.outside(seg.to):
            return False
        if seg.frm is seg.to or seg.frm.same_spot(seg.to):
            return False
        if seg.to.degree >= MAX_DEGREE or seg.frm.degree >= MAX_DEGREE:
            return False
        return True

    def is_close(self, a, b):
        return a.distance(b) < self.snap_radius

    def is_close_to_map_edge(self, node):
        b = self.border
        return (node.x >= b - EDGE_MARGIN or node.x <= -b + EDGE_MARGIN
                or node.y >= b - EDGE_MARGIN or node.y <= -b + EDGE_MARGIN)

    def snap_end(self, seg, index):
        # the last close segment end in acceptance order wins
        for road in index.query(point_aabb(seg.to.pos, self.snap_radius * 2)):
            if self.is_close(seg.to, road.to):
                seg.to = road.to
                seg.end_segment = True

    def crosses(self, seg, index):
        return any(seg.is_crossing(road) for road in index.query(seg.aabb()))

    # -------- commit --------
    def accept(self, seg):
        self.segments.append(seg)
        seg.frm = self.tier.add_node(seg.frm)
        seg.to = self.tier.add_node(seg.to)
        self.tier.connect(seg.frm, seg.to)
        self.index.insert(seg.aabb(), seg)


def make_segment_index(border, max_objects=None, max_levels=None):
    return Quadtree((-border, -border, border*2, border*2), max_objects=max_objects, max_levels=max_levels)


def grow(grower, policy):
    """Run one growth pass. ``policy`` supplies generate_start / check_local / global_goals."""
    policy.generate_start(grower)
    while grower.queue and not grower.at_capacity():
        seg = grower.queue.popleft()
        if not policy.check_local(grower, seg):
            continue
        grower.accept(seg)
        policy.global_goals(grower, seg)
    if grower.at_capacity():
        logger.info("{} roads reached maximal amount ({})", grower.tier.name.capitalize(), grower.max_segments)
    return grower.segments


class MajorRoads:
    def generate_start(self, g):
        # a start point around the middle of the map, then two opposite directions
        sx = g.rng.randrange(0, int(g.border * 100)); sy = g.rng.randrange(0, int(g.border * 100))
        start = Node(sx / 100.0 - g.border / 2, sy / 100.0 - g.border / 2)
        dirv = (g.rng.randrange(-100, 100), g.rng.randrange(-100, 100))
        g.queue.append(g.new_segment(start, dirv))
        g.queue.append(g.new_segment(start, (-dirv[0], -dirv[1])))

    def check_local(self, g, seg) -> bool:
        g.snap_end(seg, g.index)
        if g.crosses(seg, g.index):
            return False
        if not g.shared_constraints(seg):
            return False
        if seg.to.is_connected_to(seg.frm):
            return False
        return True

    def global_goals(self, g, seg):
        g.expand(seg)


class MinorRoads:
    """Side streets grown off the accepted major segments.

    Minor roads snap onto major and minor segment ends, may not cross
    either tier, and need a free angular slot at both ends.
    """

    def __init__(self, major_segments, spawn_on_major_prob, free_angle_tol):
        self.major_segments = major_segments
        self.spawn_on_major_prob = spawn_on_major_prob
        self.free_angle_tol = free_angle_tol
        self.major_index = None

    def generate_start(self, g):
        self.major_index = make_segment_index(g.border)
        for road in self.major_segments:
            self.major_index.insert(road.aabb(), road)
        for road in self.major_segments:
            if road.end_segment:
                continue
            if g.rng.random() < self.spawn_on_major_prob:
                continue
            dirv = road.direction()
            g.queue.append(g.new_segment(road.to, right_normal(dirv)))
            g.queue.append(g.new_segment(road.to, left_normal(dirv)))

    def check_local(self, g, seg) -> bool:
        g.snap_end(seg, self.major_index)
        g.snap_end(seg, g.index)
        if g.crosses(seg, self.major_index) or g.crosses(seg, g.index):
            return False
        if not g.shared_constraints(seg):
            return False
        return self.nodes_free(seg)

    def nodes_free(self, seg):
        frm, to = seg.frm, seg.to
        if not frm.is_free(math.atan2(to.y - frm.y, to.x - frm.x), self.free_angle_tol):
            return False
        return to.is_free(math.atan2(frm.y - to.y, frm.x - to.x), self.free_angle_tol)

    def global_goals(self, g, seg):
        g.expand(seg)

    def clean_up(self, g):
        self.delete_inside_leaves(g)
        self.delete_alone_edges(g.tier)
        self.delete_alone_nodes(g.tier)

    def delete_inside_leaves(self, g):
        tier = g.tier
        leaves, edges = [], []
        for node in tier.nodes:
            # a minor end on a major road is a junction; map edge dead ends are kept
            if node.degree == 1 and not g.is_close_to_map_edge(node):
                leaves.append(node)
                edge = tier.edges_of(node)[0]
                if not any(e is edge for e in edges): edges.append(edge)
        for edge in edges:
            tier.remove_edge(edge)
        for node in leaves:
            tier.remove_node(node)
        logger.debug("Removed {} minor leaves", len(leaves))

    @staticmethod
    def delete_alone_edges(tier):
        alone = [e for e in tier.edges if e.a.degree == 1 and e.b.degree == 1]
        for edge in alone:
            tier.remove_edge(edge)

    @staticmethod
    def delete_alone_nodes(tier):
        # shared junctions keep their major edges but leave this tier
        for node in [n for n in tier.nodes if tier.degree(n) <= 0]:
            tier.remove_node(node)


class RoadNetwork:
    __slots__ = ("graph", "major_segments", "minor_segments")

    def __init__(self, graph, major_segments, minor_segments):
        self.graph = graph
        self.major_segments = major_segments
        self.minor_segments = minor_segments


def generate_roads(rng, params, graph=None):
    """Major pass, then a minor pass seeded from the major segments."""
    graph = graph if graph is not None else Graph()
    border = params["MAP_SIZE"]; road_length = params["ROAD_LENGTH"]
    qt = dict(qt_max_objects=params["QUADTREE_MAX_OBJECTS"], qt_max_levels=params["QUADTREE_MAX_LEVELS"])

    major = RoadGrower(rng, graph.major, border, params["MAX_MAJOR_ROADS"], params["MAJOR_MAX_CURVE_DEG"],
                       params["MAJOR_BRANCH_PROB"], params["MAJOR_LEAN_PROB"], road_length, **qt)
    grow(major, MajorRoads())

    minor = RoadGrower(rng, graph.minor, border, params["MAX_MINOR_ROADS"], params["MINOR_MAX_CURVE_DEG"],
                       params["MINOR_BRANCH_PROB"], params["MINOR_LEAN_PROB"], road_length, **qt)
    policy = MinorRoads(major.segments, params["SPAWN_ON_MAJOR_PROB"], math.radians(params["FREE_ANGLE_TOL_DEG"]))
    grow(minor, policy)
    policy.clean_up(minor)

    logger.debug("{} major and {} minor roads generated", len(major.segments), len(minor.segments))
    return RoadNetwork(graph, major.segments, minor.segments)
