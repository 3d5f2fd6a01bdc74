"""Road graph: nodes, edges and the major / minor tiers they live in."""
import math

from geometry import EPS


class Node:
    __slots__ = ("x", "y", "edges")

    def __init__(self, x, y):
        self.x = float(x); self.y = float(y)
        self.edges = []

    def __repr__(self):
        return f"Node({self.x:.3f}, {self.y:.3f})"

    @property
    def pos(self):
        return (self.x, self.y)

    @property
    def degree(self):
        """Incident edges over every tier the node belongs to."""
        return len(self.edges)

    def distance(self, other):
        return math.hypot(self.x - other.x, self.y - other.y)

    def same_spot(self, other, eps=EPS):
        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps

    def is_connected_to(self, other):
        return any(e.other(self) is other for e in self.edges)

    def is_free(self, angle, tol):
        """No incident edge leaves this node within ``tol`` radians of ``angle``."""
        for e in self.edges:
            o = e.other(self)
            edge_angle = math.atan2(o.y - self.y, o.x - self.x)
            diff = abs((edge_angle - angle + math.pi) % (2*math.pi) - math.pi)
            if diff < tol:
                return False
        return True


class Edge:
    """Undirected road piece. Creating one registers it on both end nodes."""
    __slots__ = ("a", "b")

    def __init__(self, a, b):
        self.a = a; self.b = b
        a.edges.append(self); b.edges.append(self)

    def __repr__(self):
        return f"Edge({self.a!r}, {self.b!r})"

    def other(self, node):
        return self.b if node is self.a else self.a

    def detach(self):
        for n in (self.a, self.b):
            if self in n.edges: n.edges.remove(self)


def _cell(x, y):
    return (round(x / EPS), round(y / EPS))


class Tier:
    """One namespace of nodes and edges (major or minor).

    Nodes are looked up on an EPS grid; a point matches a node in its own
    cell or any of the eight around it when both coordinates are within EPS.
    A junction node may belong to both tiers, so ``degree(node)`` counts
    only this tier's edges while ``node.degree`` counts all of them.
    """

    def __init__(self, name):
        self.name = name
        self.nodes = []
        self.edges = []
        self._lookup = {}
        self._members = set()

    def __repr__(self):
        return f"Tier({self.name!r}, nodes={len(self.nodes)}, edges={len(self.edges)})"

    def __contains__(self, node):
        return self._lookup.get(_cell(node.x, node.y)) is node

    def _near(self, x, y):
        cx, cy = _cell(x, y)
        for dx in (0, -1, 1):
            for dy in (0, -1, 1):
                found = self._lookup.get((cx + dx, cy + dy))
                if found is not None and abs(found.x - x) < EPS and abs(found.y - y) < EPS:
                    return found
        return None

    def add_node(self, node):
        """Register ``node``, or return the node already sitting on that spot."""
        existing = self._near(node.x, node.y)
        if existing is not None:
            return existing
        self._lookup[_cell(node.x, node.y)] = node
        self.nodes.append(node)
        return node

    def connect(self, a, b):
        a = self.add_node(a); b = self.add_node(b)
        edge = Edge(a, b)
        self.edges.append(edge)
        self._members.add(edge)
        return edge

    def edges_of(self, node):
        return [e for e in node.edges if e in self._members]

    def degree(self, node):
        return sum(1 for e in node.edges if e in self._members)

    def remove_edge(self, edge):
        edge.detach()
        self.edges.remove(edge)
        self._members.discard(edge)

    def remove_node(self, node):
        if self._lookup.get(_cell(node.x, node.y)) is node:
            del self._lookup[_cell(node.x, node.y)]
        self.nodes.remove(node)


class Graph:
    def __init__(self):
        self.major = Tier("major")
        self.minor = Tier("minor")

    def __repr__(self):
        return f"Graph({self.major!r}, {self.minor!r})"

    @property
    def major_nodes(self): return self.major.nodes
    @property
    def major_edges(self): return self.major.edges
    @property
    def minor_nodes(self): return self.minor.nodes
    @property
    def minor_edges(self): return self.minor.edges

    def tiers(self):
        return (self.major, self.minor)
