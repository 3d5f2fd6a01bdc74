"""pygame window for looking at a generated city.

Generation runs on a background thread; the window polls for the single
"ready" signal and then draws the road tiers, lots, undivided blocks and
the bounding rectangles / cut lines the divider produced.

Keys: R new seed, B bounding boxes, N road nodes, L lots, Esc quit.
Mouse wheel zooms, left drag pans.
"""
import math
import sys

from loguru import logger

from city_gen import CityGenerator

SCALE = 1.5
def Si(x): return int(round(x*SCALE))

WIDTH  = Si(800)
HEIGHT = Si(800)

BG_COLOR      = (247, 246, 242)
GRID_COLOR    = (232, 232, 232)
MAJOR_COLOR   = (120, 124, 132)
MINOR_COLOR   = (164, 168, 176)
NODE_COLOR    = (60, 60, 60)
LOT_FILL      = (214, 219, 224)
LOT_STROKE    = (120, 130, 140)
EMPTY_FILL    = (236, 230, 214)
BOX_COLOR     = (200, 200, 200)
CUT_COLOR     = (220, 180, 40)


class Camera:
    """World (y up, centred on 0,0) to screen (y down) mapping."""

    def __init__(self, map_size, size=(WIDTH, HEIGHT)):
        self.size = size
        self.zoom = min(size) / (2.0 * map_size)
        self.offset = [0.0, 0.0]

    def world_to_screen(self, pt):
        w, h = self.size
        return (w*0.5 + (pt[0] - self.offset[0]) * self.zoom,
                h*0.5 - (pt[1] - self.offset[1]) * self.zoom)

    def screen_to_world(self, pt):
        w, h = self.size
        return ((pt[0] - w*0.5) / self.zoom + self.offset[0],
                (h*0.5 - pt[1]) / self.zoom + self.offset[1])

    def zoom_at(self, screen_pt, factor):
        before = self.screen_to_world(screen_pt)
        self.zoom = max(0.05, min(50.0, self.zoom * factor))
        after = self.screen_to_world(screen_pt)
        self.offset[0] += before[0] - after[0]; self.offset[1] += before[1] - after[1]


def draw_grid(screen, cam, map_size, step=None):
    import pygame
    step = step or max(1, map_size // 10)
    v = -map_size
    while v <= map_size:
        a = cam.world_to_screen((v, -map_size)); b = cam.world_to_screen((v, map_size))
        pygame.draw.line(screen, GRID_COLOR, a, b, 1)
        a = cam.world_to_screen((-map_size, v)); b = cam.world_to_screen((map_size, v))
        pygame.draw.line(screen, GRID_COLOR, a, b, 1)
        v += step


def draw_blocks(screen, cam, blocks, fill, stroke=LOT_STROKE):
    import pygame
    for block in blocks:
        if len(block.nodes) < 3: continue
        pts = [cam.world_to_screen(n.pos) for n in block.nodes]
        pygame.draw.polygon(screen, fill, pts)
        pygame.draw.polygon(screen, stroke, pts, 1)


def draw_edges(screen, cam, edges, color, width):
    import pygame
    w = max(1, int(width * cam.zoom))
    for e in edges:
        pygame.draw.line(screen, color, cam.world_to_screen(e.a.pos), cam.world_to_screen(e.b.pos), w)


def draw_nodes(screen, cam, nodes, color, radius):
    import pygame
    r = max(1, int(radius * cam.zoom))
    for n in nodes:
        x, y = cam.world_to_screen(n.pos)
        pygame.draw.circle(screen, color, (int(x), int(y)), r)


def draw_bounding(screen, cam, rects):
    import pygame
    for rect in rects:
        pts = [cam.world_to_screen(c) for c in rect.corners]
        pygame.draw.polygon(screen, BOX_COLOR, pts, 1)
        cut = rect.cut_edge()
        if cut:
            pygame.draw.line(screen, CUT_COLOR, cam.world_to_screen(cut[0]), cam.world_to_screen(cut[1]), 1)


def draw_city(screen, cam, result, params, show=None):
    show = show or {}
    screen.fill(BG_COLOR)
    draw_grid(screen, cam, params["MAP_SIZE"])
    if result is None:
        return
    if show.get("lots", True):
        draw_blocks(screen, cam, result.non_divided, EMPTY_FILL)
        draw_blocks(screen, cam, result.lots, LOT_FILL)
    draw_edges(screen, cam, result.graph.minor_edges, MINOR_COLOR, params["MINOR_THICKNESS"])
    draw_edges(screen, cam, result.graph.major_edges, MAJOR_COLOR, params["MAJOR_THICKNESS"])
    if show.get("nodes"):
        draw_nodes(screen, cam, result.graph.major_nodes, NODE_COLOR, 1.0)
        draw_nodes(screen, cam, result.graph.minor_nodes, NODE_COLOR, 0.5)
    if show.get("boxes"):
        draw_bounding(screen, cam, result.bounding_rectangles)


def main(params=None, block_extractor=None):
    import pygame
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    pygame.init(); pygame.font.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    font = pygame.font.Font(None, Si(20))
    clock = pygame.time.Clock()

    gen = CityGenerator(params, block_extractor).start()
    cam = Camera(gen.params["MAP_SIZE"])
    show = {"lots": True, "nodes": False, "boxes": False}
    result = None
    dragging = None
    running = True

    while running:
        clock.tick(60)
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE: running = False
                elif event.key == pygame.K_b: show["boxes"] = not show["boxes"]
                elif event.key == pygame.K_n: show["nodes"] = not show["nodes"]
                elif event.key == pygame.K_l: show["lots"] = not show["lots"]
                elif event.key == pygame.K_r and gen.ready:
                    seed = gen.params["SEED"] + 1
                    gen = CityGenerator(dict(gen.params, SEED=seed), block_extractor).start()
                    result = None
                    logger.info("Regenerating with seed {}", seed)
            elif event.type == pygame.MOUSEWHEEL:
                cam.zoom_at(pygame.mouse.get_pos(), math.pow(1.1, event.y))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                dragging = event.pos
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                dragging = None
            elif event.type == pygame.MOUSEMOTION and dragging:
                dx, dy = event.pos[0] - dragging[0], event.pos[1] - dragging[1]
                cam.offset[0] -= dx / cam.zoom; cam.offset[1] += dy / cam.zoom
                dragging = event.pos

        if result is None and gen.ready:
            result = gen.result()

        draw_city(screen, cam, result, gen.params, show)
        status = f"seed {gen.params['SEED']}" if result else "generating..."
        screen.blit(font.render(status, True, (30, 30, 30)), (Si(10), Si(10)))
        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
