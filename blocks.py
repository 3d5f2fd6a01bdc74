"""City blocks and their recursive division into building lots."""
from loguru import logger

from bounding import min_bounding_rectangle
from geometry import EPS, Line, is_simple_polygon, poly_area
from params import ConfigError

MAX_ITERATION = 6
MAX_VERTICES = 10
MIN_LOT_AREA = 10.0
MAX_ASPECT_RATIO = 4.0
AREA_REL_TOL = 1e-6


class SliceError(RuntimeError):
    """A cut line failed to split a polygon the way the divider expects."""


class BlockNode:
    __slots__ = ("x", "y", "block", "edges")

    def __init__(self, x, y, block=None):
        self.x = float(x); self.y = float(y)
        self.block = block
        # kept for parity with road nodes; polygon geometry never reads it
        self.edges = []

    def __repr__(self):
        return f"BlockNode({self.x:.3f}, {self.y:.3f})"

    @property
    def pos(self):
        return (self.x, self.y)

    def equals(self, other, eps=EPS):
        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps


class Block:
    """Closed polygon; node order is the winding order."""

    def __init__(self, points=()):
        self.nodes = []
        self.height = 0.0
        self.is_occupied = True
        for p in points:
            self.add(p)

    def __repr__(self):
        return f"Block({len(self.nodes)} nodes, height={self.height:.2f}, occupied={self.is_occupied})"

    def add(self, p):
        """Append a fresh node at ``p`` (a point tuple or any node with x / y)."""
        x, y = (p.x, p.y) if hasattr(p, "x") else p
        node = BlockNode(x, y, self)
        self.nodes.append(node)
        return node

    def points(self):
        return [n.pos for n in self.nodes]

    def area(self):
        return abs(poly_area(self.points()))

    def remove_close_nodes(self):
        n = len(self.nodes)
        doomed = [i for i in range(n) if self.nodes[i].equals(self.nodes[(i+1) % n])]
        for i in reversed(doomed):
            del self.nodes[i]


class BlockDivider:
    """Cuts blocks into lots along random lines through their bounding rectangles.

    ``bounding_rectangles`` keeps one rectangle per division attempt for
    drawing; ``non_divided`` holds blocks that could not be cut at all.
    """

    def __init__(self, rng):
        self.rng = rng
        self.non_divided = []
        self.bounding_rectangles = []
        self.lots = []

    def divide_blocks(self, blocks):
        lots = []
        for block in blocks:
            lots.extend(self.divide_block(block, 1))
        skipped = {id(b) for b in self.non_divided}
        self.lots = [lot for lot in lots if id(lot) not in skipped]
        logger.debug("{} lots from division, {} blocks left undivided", len(self.lots), len(self.non_divided))
        return self.lots

    def divide_block(self, block, iteration):
        block.is_occupied = True
        if iteration > MAX_ITERATION:
            return [block]
        if len(block.nodes) > MAX_VERTICES:
            block.is_occupied = False
            self.non_divided.append(block)
            return [block]

        rect = min_bounding_rectangle(block.points())
        self.bounding_rectangles.append(rect)
        pieces = self.slice_block(rect.cut_line(self.rng), block)

        if (len(pieces) > 1 and self.covers_block(block, pieces)
                and all(self.valid_block(p) for p in pieces)):
            lots = []
            for piece in pieces:
                lots.extend(self.divide_block(piece, iteration + 1))
            return lots

        block.is_occupied = False
        if iteration == 1:
            self.non_divided.append(block)
        return [block]

    @staticmethod
    def valid_block(block):
        rect = min_bounding_rectangle(block.points())
        if rect.area() < MIN_LOT_AREA:
            return False
        if rect.aspect_ratio() > MAX_ASPECT_RATIO:
            return False
        return True

    @staticmethod
    def covers_block(block, pieces):
        """Pieces are simple and their areas add up to the block's area.

        A cut crossing a concave block more than twice pairs the crossings
        wrongly and produces pieces lying outside the block.
        """
        if not all(is_simple_polygon(p.points()) for p in pieces):
            return False
        total = block.area()
        return abs(sum(p.area() for p in pieces) - total) <= AREA_REL_TOL * max(total, 1.0)

    @staticmethod
    def slice_block(cut, block):
        nodes = block.nodes
        count = len(nodes)
        on_right = cut.is_right(nodes[0].pos)

        first_idx, first_pt = -1, None
        last_idx, last_pt = -1, None
        pieces = []

        for i in range(count):
            nxt = 0 if i == count - 1 else i + 1
            next_right = cut.is_right(nodes[nxt].pos)
            if next_right == on_right:
                continue
            pt = cut.crossing(Line(nodes[i].pos, nodes[nxt].pos))
            if first_idx == -1:
                if i == count - 1:
                    raise SliceError("Line side change should have happened earlier")
                first_idx, first_pt = nxt, pt
            else:
                stop = i + 1 if nxt == 0 else nxt
                pieces.append(Block(nodes[last_idx:stop] + [pt, last_pt]))
            last_idx, last_pt = nxt, pt
            on_right = next_right

        if not pieces:
            raise SliceError("Slicing failed: cut line does not cross the block")

        wrap = nodes[last_idx:] if last_idx != 0 else []
        pieces.append(Block(wrap + nodes[:first_idx] + [first_pt, last_pt]))

        for piece in pieces:
            piece.remove_close_nodes()
        return pieces

    def set_building_heights(self, min_height, max_height, map_size, lots=None):
        if min_height > max_height:
            raise ConfigError("minimum height of a building has to be smaller than the maximum height of a building")
        lots = self.lots if lots is None else lots
        for lot in lots:
            height = self.rng.random() * max_height + min_height
            if height > max_height / 2 and self.rng.randrange(0, 10) != 2:
                height /= 2
            x, y = lot.nodes[0].x, lot.nodes[0].y
            if map_size - abs(x) < 2 * map_size / 3 or map_size - abs(y) < 2 * map_size / 3:
                height /= 2
            if height < min_height:
                height += min_height
            lot.height = height
        return lots
