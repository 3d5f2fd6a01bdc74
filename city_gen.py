"""One-shot city generation: roads, then (externally extracted) blocks, then lots.

The pipeline owns a single seeded ``random.Random`` and threads it through
every stage in order, so a seed and a parameter set always reproduce the
same graph and the same lots.
"""
from __future__ import annotations

import random
import threading
import time
from typing import Callable, List, Optional

from loguru import logger

from blocks import Block, BlockDivider
from graph import Graph
from params import make_params
from roads import generate_roads

BlockExtractor = Callable[[Graph, dict], List[Block]]


class CityResult:
    __slots__ = ("graph", "major_segments", "minor_segments", "blocks",
                 "lots", "non_divided", "bounding_rectangles", "timings")

    def __init__(self, graph, major_segments, minor_segments, blocks=(), lots=(),
                 non_divided=(), bounding_rectangles=(), timings=None):
        self.graph = graph
        self.major_segments = list(major_segments)
        self.minor_segments = list(minor_segments)
        self.blocks = list(blocks)
        self.lots = list(lots)
        self.non_divided = list(non_divided)
        self.bounding_rectangles = list(bounding_rectangles)
        self.timings = dict(timings or {})


class CityGenerator:
    """Runs the pipeline synchronously via ``run()`` or on a worker via ``start()``.

    ``block_extractor`` turns the finished road graph into city blocks; it
    is supplied by the caller.  Without one the lot stage has nothing to
    divide and the result carries the road graph only.
    """

    def __init__(self, params=None, block_extractor: Optional[BlockExtractor] = None):
        self.params = make_params(params)
        self.block_extractor = block_extractor
        self._thread = None
        self._ready = threading.Event()
        self._result = None
        self._error = None

    def run(self) -> CityResult:
        p = self.params
        rng = random.Random(p["SEED"])
        t0 = time.perf_counter()

        net = generate_roads(rng, p)
        t_roads = time.perf_counter()
        logger.info("Road generation time taken: {:.1f} ms", (t_roads - t0) * 1000)
        logger.info("{} major roads generated", len(net.major_segments))
        logger.info("{} minor roads generated", len(net.minor_segments))

        blocks = list(self.block_extractor(net.graph, p)) if self.block_extractor else []
        logger.info("{} blocks handed to division", len(blocks))

        divider = BlockDivider(rng)
        lots = divider.divide_blocks(blocks)
        divider.set_building_heights(p["MIN_BUILDING_HEIGHT"], p["MAX_BUILDING_HEIGHT"], p["MAP_SIZE"])
        t_lots = time.perf_counter()
        logger.info("Lot generation time taken: {:.1f} ms ({} lots)", (t_lots - t_roads) * 1000, len(lots))
        logger.info("City generation time taken: {:.1f} ms", (t_lots - t0) * 1000)

        return CityResult(net.graph, net.major_segments, net.minor_segments, blocks, lots,
                          divider.non_divided, divider.bounding_rectangles,
                          {"roads_ms": (t_roads - t0) * 1000, "lots_ms": (t_lots - t_roads) * 1000,
                           "total_ms": (t_lots - t0) * 1000})

    # -------- background worker --------
    def start(self):
        if self._thread is not None:
            raise RuntimeError("generation already started")
        self._thread = threading.Thread(target=self._work, name="city-gen", daemon=True)
        self._thread.start()
        return self

    def _work(self):
        try:
            self._result = self.run()
        except Exception as e:
            logger.exception("City generation failed")
            self._error = e
        finally:
            self._ready.set()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def result(self, timeout=None) -> CityResult:
        """Wait for the worker and return its result, re-raising its failure."""
        if self._thread is None:
            raise RuntimeError("generation not started")
        if not self._ready.wait(timeout):
            raise TimeoutError("city generation still running")
        if self._error is not None:
            raise self._error
        return self._result
