import math
import random

import pytest

from geometry import segments_cross
from graph import Node, Tier
from params import make_params
from roads import MajorRoads, MinorRoads, RoadGrower, Segment, generate_roads, grow


class StubRng:
    """Deterministic stand-in: randrange always returns ``pick``, random() returns ``real``."""

    def __init__(self, pick=0, real=0.5):
        self.pick = pick; self.real = real
        self.calls = []

    def randrange(self, *args):
        self.calls.append(args)
        return self.pick

    def random(self):
        return self.real


def make_grower(rng=None, tier=None, border=50, max_segments=100, **kw):
    opts = dict(max_angle=10, branch_prob=0.15, lean_prob=0.25)
    opts.update(kw)
    return RoadGrower(rng or random.Random(0), tier or Tier("major"), border, max_segments, **opts)


def heading(seg):
    dx, dy = seg.direction()
    return math.degrees(math.atan2(dy, dx))


def test_new_segment_has_road_length():
    g = make_grower()
    seg = g.new_segment(Node(1, 1), (3, 4))
    assert seg.frm.pos == (1, 1)
    assert seg.to.pos == pytest.approx((7.0, 9.0))


def test_random_angle_range():
    g = make_grower(random.Random(5))
    for _ in range(500):
        a = g.random_angle(-2, 20)
        assert math.radians(-2) - 1e-12 <= a < math.radians(20)
    for _ in range(200):
        a = g.random_angle(-2, -10)
        assert math.radians(-10) - 1e-12 <= a < math.radians(-2)
    assert g.random_angle(3, 3) == pytest.approx(math.radians(3))


@pytest.mark.parametrize("pick,expected", [(0, 0), (1, 1), (2, 1), (3, 2), (7, 0)])
def test_branch_counts(pick, expected):
    rng = StubRng(pick=pick)
    g = make_grower(rng, branch_prob=0.15)
    g.branch(Segment(Node(0, 0), Node(10, 0)))
    assert rng.calls == [(0, 20)]
    assert len(g.goals) == expected


def test_branch_directions():
    g = make_grower(StubRng(pick=1))
    g.branch(Segment(Node(0, 0), Node(10, 0)))
    assert g.goals[0].to.pos == pytest.approx((10.0, -10.0))

    g = make_grower(StubRng(pick=2))
    g.branch(Segment(Node(0, 0), Node(10, 0)))
    assert g.goals[0].to.pos == pytest.approx((10.0, 10.0))

    g = make_grower(StubRng(pick=3))
    g.branch(Segment(Node(0, 0), Node(10, 0)))
    assert [s.to.pos for s in g.goals] == [pytest.approx((10.0, -10.0)), pytest.approx((10.0, 10.0))]
    assert all(s.frm.pos == (10, 0) for s in g.goals)


def test_continuing_segment_goes_straight_without_lean():
    g = make_grower(StubRng(pick=5, real=0.9), lean_prob=0.25)
    nxt = g.continuing_segment(Segment(Node(0, 0), Node(10, 0)))
    assert nxt.frm.pos == (10, 0)
    assert nxt.to.pos == pytest.approx((20.0, 0.0))
    assert not nxt.lean_left and not nxt.lean_right


def test_continuing_segment_keeps_left_lean():
    g = make_grower(StubRng(pick=3, real=0.9), lean_prob=0.25, max_angle=10)
    seg = Segment(Node(0, 0), Node(10, 0)); seg.lean_left = True
    nxt = g.continuing_segment(seg)
    assert nxt.lean_left and not nxt.lean_right
    assert heading(nxt) == pytest.approx(5.0)


def test_continuing_segment_keeps_right_lean():
    g = make_grower(StubRng(pick=3, real=0.9), lean_prob=0.25, max_angle=10)
    seg = Segment(Node(0, 0), Node(10, 0)); seg.lean_right = True
    nxt = g.continuing_segment(seg)
    assert nxt.lean_right and not nxt.lean_left
    # [-10, -2): -10 + 3
    assert heading(nxt) == pytest.approx(-7.0)


def test_continuing_segment_new_lean_sets_flag():
    rng = StubRng(pick=3, real=0.1)
    g = make_grower(rng, lean_prob=0.25, max_angle=10)
    nxt = g.continuing_segment(Segment(Node(0, 0), Node(10, 0)))
    assert rng.calls == [(22,)]
    assert heading(nxt) == pytest.approx(1.0)
    assert nxt.lean_left

    g = make_grower(StubRng(pick=0, real=0.1), lean_prob=0.25, max_angle=10)
    nxt = g.continuing_segment(Segment(Node(0, 0), Node(10, 0)))
    assert heading(nxt) == pytest.approx(-2.0)
    assert nxt.lean_right


def test_shared_constraints():
    g = make_grower(border=50)
    assert g.shared_constraints(Segment(Node(0, 0), Node(10, 0)))
    assert not g.shared_constraints(Segment(Node(45, 0), Node(55, 0)))
    assert not g.shared_constraints(Segment(Node(0, -51), Node(0, -45)))
    n = Node(3, 3)
    assert not g.shared_constraints(Segment(n, n))
    assert not g.shared_constraints(Segment(Node(3, 3), Node(3, 3)))

    hub = Node(0, 0)
    for p in [(10, 0), (0, 10), (-10, 0), (0, -10)]:
        g.tier.connect(hub, Node(*p))
    assert not g.shared_constraints(Segment(hub, Node(7, 7)))
    assert not g.shared_constraints(Segment(Node(7, 7), hub))


def test_map_edge_margin():
    g = make_grower(border=50)
    assert g.is_close_to_map_edge(Node(48, 0))
    assert g.is_close_to_map_edge(Node(0, -49))
    assert not g.is_close_to_map_edge(Node(47.9, 10))


class LinePolicy:
    """Start with a row of segments, reject the odd ones, never expand."""

    def __init__(self, count):
        self.count = count
        self.seen = []

    def generate_start(self, g):
        for i in range(self.count):
            g.queue.append(Segment(Node(i * 10, 0), Node(i * 10, 5)))

    def check_local(self, g, seg):
        self.seen.append(seg)
        return len(self.seen) % 2 == 1

    def global_goals(self, g, seg):
        pass


def test_grow_rejects_and_accepts_in_queue_order():
    g = make_grower()
    policy = LinePolicy(6)
    accepted = grow(g, policy)
    assert [s.frm.x for s in accepted] == [0, 20, 40]
    assert len(g.tier.edges) == 3 and len(g.tier.nodes) == 6
    assert not g.queue


def test_grow_stops_at_max_segments():
    g = make_grower(max_segments=2)
    grow(g, LinePolicy(10))
    assert len(g.segments) == 2
    assert len(g.queue) == 7


def test_accept_reuses_existing_nodes():
    g = make_grower()
    first = Segment(Node(0, 0), Node(10, 0))
    g.accept(first)
    second = Segment(Node(10, 0), Node(20, 0))
    g.accept(second)
    assert second.frm is first.to
    assert first.to.degree == 2
    assert len(g.tier.nodes) == 3


def test_major_snaps_to_nearby_end():
    g = make_grower()
    road = Segment(Node(0, 0), Node(10, 0)); g.accept(road)
    cand = Segment(Node(20, 5), Node(13, 2))
    assert MajorRoads().check_local(g, cand)
    assert cand.to is road.to
    assert cand.end_segment


def test_major_rejects_crossing():
    g = make_grower()
    g.accept(Segment(Node(0, 0), Node(10, 0)))
    cand = Segment(Node(5, -9), Node(5, 9))
    assert not MajorRoads().check_local(g, cand)
    assert not cand.end_segment


def test_major_rejects_duplicate_edge():
    g = make_grower()
    road = Segment(Node(0, 0), Node(10, 0)); g.accept(road)
    cand = Segment(road.frm, Node(10.5, 0.5))
    assert not MajorRoads().check_local(g, cand)


def test_major_global_goals_skip_end_segments():
    g = make_grower(StubRng(pick=3, real=0.9))
    seg = Segment(Node(0, 0), Node(10, 0)); seg.end_segment = True
    MajorRoads().global_goals(g, seg)
    assert not g.queue
    seg.end_segment = False
    MajorRoads().global_goals(g, seg)
    # two branches, then the continuation
    assert len(g.queue) == 3
    assert g.queue[-1].to.pos == pytest.approx((20.0, 0.0))


def test_major_start_segments_are_opposite():
    g = make_grower(random.Random(13))
    MajorRoads().generate_start(g)
    a, b = g.queue
    assert a.frm is b.frm
    assert -25 <= a.frm.x < 25 and -25 <= a.frm.y < 25
    da, db = a.direction(), b.direction()
    assert da[0] == pytest.approx(-db[0]) and da[1] == pytest.approx(-db[1])


def test_minor_start_segments_follow_spawn_probability():
    majors = [Segment(Node(0, 0), Node(10, 0)), Segment(Node(10, 0), Node(20, 0))]
    majors[1].end_segment = True

    g = make_grower(StubRng(real=0.5), Tier("minor"))
    MinorRoads(majors, 0.6, math.radians(10)).generate_start(g)
    assert not g.queue

    g = make_grower(StubRng(real=0.5), Tier("minor"))
    MinorRoads(majors, 0.1, math.radians(10)).generate_start(g)
    assert [s.to.pos for s in g.queue] == [pytest.approx((10.0, -10.0)), pytest.approx((10.0, 10.0))]
    assert all(s.frm is majors[0].to for s in g.queue)


def test_minor_rejects_crossing_major_roads():
    majors = [Segment(Node(0, -9), Node(0, 9))]
    g = make_grower(StubRng(real=0.99), Tier("minor"))
    policy = MinorRoads(majors, 0.6, math.radians(10))
    policy.generate_start(g)
    g.queue.clear()
    assert not policy.check_local(g, Segment(Node(-5, 0), Node(5, 0)))
    assert policy.check_local(g, Segment(Node(5, 0), Node(15, 0)))


def test_minor_snaps_onto_major_end():
    majors = [Segment(Node(0, 0), Node(10, 0))]
    g = make_grower(StubRng(real=0.99), Tier("minor"))
    policy = MinorRoads(majors, 0.6, math.radians(10))
    policy.generate_start(g)
    cand = Segment(Node(10, 12), Node(11, 3))
    assert policy.check_local(g, cand)
    assert cand.to is majors[0].to and cand.end_segment


def test_minor_requires_free_slot():
    g = make_grower(tier=Tier("minor"))
    policy = MinorRoads([], 0.6, math.radians(10))
    policy.generate_start(g)
    o = Node(0, 0)
    # long enough that candidates below stay out of snapping range
    g.accept(Segment(o, Node(30, 0)))
    assert not policy.check_local(g, Segment(o, Node(10, 0.5)))
    assert policy.check_local(g, Segment(o, Node(0, 10)))


def test_minor_clean_up_removes_inside_leaves():
    tier = Tier("minor")
    g = make_grower(tier=tier, border=50)
    a, b, c, d = Node(0, 0), Node(10, 0), Node(10, 10), Node(0, 10)
    e, f = Node(48.5, 0), Node(15, 15)
    for p, q in [(a, b), (b, c), (c, d), (d, a), (b, e), (c, f)]:
        tier.connect(p, q)
    MinorRoads([], 0.6, 0.1).clean_up(g)
    assert tier.nodes == [a, b, c, d, e]
    assert len(tier.edges) == 5
    assert f.degree == 0 and c.degree == 2


def test_minor_clean_up_removes_alone_edges_and_nodes():
    tier = Tier("minor")
    g = make_grower(tier=tier, border=50)
    p, q = Node(48.5, 20), Node(20, 48.5)
    tier.connect(p, q)
    MinorRoads([], 0.6, 0.1).clean_up(g)
    assert tier.nodes == [] and tier.edges == []


def test_minor_clean_up_collapses_dead_end_chain():
    tier = Tier("minor")
    g = make_grower(tier=tier, border=50)
    a, b, c = Node(0, 0), Node(10, 0), Node(20, 0)
    tier.connect(a, b); tier.connect(b, c)
    MinorRoads([], 0.6, 0.1).clean_up(g)
    assert tier.nodes == [] and tier.edges == []


def test_minor_clean_up_releases_shared_junction():
    g_major = make_grower(tier=Tier("major"))
    m1, m2 = Node(0, 0), Node(10, 0)
    g_major.tier.connect(m1, m2)
    tier = Tier("minor")
    g = make_grower(tier=tier, border=50)
    p = Node(10, 20)
    tier.connect(m2, p)
    MinorRoads([], 0.6, 0.1).clean_up(g)
    assert tier.nodes == [] and tier.edges == []
    assert m2 in g_major.tier and m2.degree == 1


def test_minor_clean_up_keeps_spur_onto_major_road():
    major = Tier("major")
    m1, m2 = Node(0, 0), Node(10, 0)
    major.connect(m1, m2)
    tier = Tier("minor")
    g = make_grower(tier=tier, border=50)
    a, b, c = Node(10, 10), Node(20, 10), Node(20, 0)
    for u, v in [(m2, a), (a, b), (b, c), (c, m2)]:
        tier.connect(u, v)
    MinorRoads([], 0.6, 0.1).clean_up(g)
    assert len(tier.edges) == 4
    assert all(tier.degree(n) == 2 for n in tier.nodes)


def small_params(**kw):
    base = dict(MAP_SIZE=60, MAX_MAJOR_ROADS=80, MAX_MINOR_ROADS=300)
    base.update(kw)
    return make_params(base)


def edge_coords(tier):
    return [(e.a.pos, e.b.pos) for e in tier.edges]


def test_generation_is_deterministic():
    p = small_params()
    one = generate_roads(random.Random(13), p)
    two = generate_roads(random.Random(13), p)
    for t1, t2 in zip(one.graph.tiers(), two.graph.tiers()):
        assert edge_coords(t1) == edge_coords(t2)
        assert [n.pos for n in t1.nodes] == [n.pos for n in t2.nodes]


@pytest.mark.parametrize("seed", [1, 13, 42])
def test_degree_is_capped(seed):
    net = generate_roads(random.Random(seed), small_params())
    for tier in net.graph.tiers():
        for node in tier.nodes:
            assert node.degree <= 4


def _shares_end(e, f):
    return any(p is q or p.same_spot(q) for p in (e.a, e.b) for q in (f.a, f.b))


@pytest.mark.parametrize("seed", [1, 13, 42])
def test_no_crossings_within_a_tier(seed):
    net = generate_roads(random.Random(seed), small_params())
    for tier in net.graph.tiers():
        edges = tier.edges
        for i, e in enumerate(edges):
            for f in edges[i + 1:]:
                if _shares_end(e, f):
                    continue
                assert not segments_cross(e.a.pos, e.b.pos, f.a.pos, f.b.pos)


def test_tier_edges_reference_tier_nodes():
    net = generate_roads(random.Random(7), small_params())
    for tier in net.graph.tiers():
        for e in tier.edges:
            assert e.a in tier and e.b in tier
            assert any(x is e for x in e.a.edges) and any(x is e for x in e.b.edges)


def test_minor_tier_has_no_isolated_nodes():
    net = generate_roads(random.Random(21), small_params())
    minor = net.graph.minor
    assert all(minor.degree(node) >= 1 for node in minor.nodes)


def test_major_segment_cap():
    net = generate_roads(random.Random(13), make_params(MAP_SIZE=50, MAX_MAJOR_ROADS=5, MAX_MINOR_ROADS=0))
    assert len(net.major_segments) == 5
    assert len(net.graph.major_edges) == 5
    edges = net.graph.major_edges
    for i, e in enumerate(edges):
        for f in edges[i + 1:]:
            assert _shares_end(e, f) or not segments_cross(e.a.pos, e.b.pos, f.a.pos, f.b.pos)
    assert net.minor_segments == []
