QT_MAX_OBJECTS = 32
QT_MAX_LEVELS  = 10

class Quadtree:
    """Rect index over (x, y, w, h) boxes.

    Items that straddle a child boundary stay on the parent, so a query
    always sees every box it overlaps.  ``query`` hands payloads back in
    insertion order.
    """

    def __init__(self, bounds, depth=0, max_objects=None, max_levels=None):
        self.x,self.y,self.w,self.h = bounds
        self.depth = depth
        self.max_objects = QT_MAX_OBJECTS if max_objects is None else int(max_objects)
        self.max_levels = QT_MAX_LEVELS if max_levels is None else int(max_levels)
        self.items = []
        self.children = None
        self._count = 0

    def __len__(self):
        return self._count

    @staticmethod
    def _intersects(a, b):
        ax,ay,aw,ah = a; bx,by,bw,bh = b
        return not (ax+aw<bx or bx+bw<ax or ay+ah<by or by+bh<ay)

    @staticmethod
    def _contains(outer, inner):
        ox,oy,ow,oh = outer; ix,iy,iw,ih = inner
        return ox <= ix and oy <= iy and ix+iw <= ox+ow and iy+ih <= oy+oh

    def _subdivide(self):
        hx,hy = self.w/2, self.h/2; x,y = self.x, self.y; d = self.depth+1
        self.children = [
            Quadtree(b, d, self.max_objects, self.max_levels)
            for b in ((x, y, hx, hy), (x+hx, y, hx, hy), (x, y+hy, hx, hy), (x+hx, y+hy, hx, hy))
        ]
        # push down whatever now fits a single quadrant
        keep = []
        for entry in self.items:
            if not self._push_down(entry): keep.append(entry)
        self.items = keep

    def _push_down(self, entry):
        for child in self.children:
            if self._contains((child.x, child.y, child.w, child.h), entry[1]):
                child._insert(entry); return True
        return False

    def _insert(self, entry):
        if self.children is None:
            if len(self.items) < self.max_objects or self.depth >= self.max_levels:
                self.items.append(entry); return
            self._subdivide()
        if not self._push_down(entry):
            self.items.append(entry)

    def insert(self, rect, payload):
        if not self._intersects(rect, (self.x,self.y,self.w,self.h)): return False
        self._insert((self._count, rect, payload))
        self._count += 1
        return True

    def _collect(self, rect, out):
        if not self._intersects(rect, (self.x,self.y,self.w,self.h)): return
        for entry in self.items:
            if self._intersects(entry[1], rect): out.append(entry)
        if self.children:
            for child in self.children: child._collect(rect, out)

    def query(self, rect):
        found = []
        self._collect(rect, found)
        found.sort(key=lambda e: e[0])
        return [payload for _, _, payload in found]
