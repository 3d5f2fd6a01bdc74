"""Generation parameters: one flat dictionary of scalars, checked on entry."""

DEFAULT_PARAMS = {
    "MAP_SIZE": 300,
    "SEED": 13,
    "MAX_MAJOR_ROADS": 2000,
    "MAX_MINOR_ROADS": 10000,
    "MAJOR_MAX_CURVE_DEG": 10, "MAJOR_BRANCH_PROB": 0.15, "MAJOR_LEAN_PROB": 0.25,
    "MINOR_MAX_CURVE_DEG": 10, "MINOR_BRANCH_PROB": 0.75, "MINOR_LEAN_PROB": 0.75,
    "SPAWN_ON_MAJOR_PROB": 0.6,
    "MAJOR_THICKNESS": 2.5, "MINOR_THICKNESS": 0.9,
    "SIDEWALK_THICKNESS": 0.5,
    "MIN_BUILDING_HEIGHT": 2, "MAX_BUILDING_HEIGHT": 15,
    "ROAD_LENGTH": 10,
    "FREE_ANGLE_TOL_DEG": 10,
    "QUADTREE_MAX_OBJECTS": 32,
    "QUADTREE_MAX_LEVELS": 10,
}

# key -> (low, high, integer only); None means unbounded on that side
RANGES = {
    "MAP_SIZE": (1, None, True),
    "SEED": (None, None, True),
    "MAX_MAJOR_ROADS": (0, None, True),
    "MAX_MINOR_ROADS": (0, None, True),
    "MAJOR_MAX_CURVE_DEG": (0, 20, False),
    "MAJOR_BRANCH_PROB": (0.01, 1.0, False),
    "MAJOR_LEAN_PROB": (0.01, 1.0, False),
    "MINOR_MAX_CURVE_DEG": (0, 20, False),
    "MINOR_BRANCH_PROB": (0.01, 1.0, False),
    "MINOR_LEAN_PROB": (0.01, 1.0, False),
    "SPAWN_ON_MAJOR_PROB": (0.01, 1.0, False),
    "MAJOR_THICKNESS": (0.1, 2.5, False),
    "MINOR_THICKNESS": (0.1, 2.5, False),
    "SIDEWALK_THICKNESS": (0.1, 1.0, False),
    "MIN_BUILDING_HEIGHT": (0, None, False),
    "MAX_BUILDING_HEIGHT": (0, None, False),
    "ROAD_LENGTH": (1e-6, None, False),
    "FREE_ANGLE_TOL_DEG": (0, 90, False),
    "QUADTREE_MAX_OBJECTS": (1, None, True),
    "QUADTREE_MAX_LEVELS": (1, None, True),
}


class ConfigError(ValueError):
    """Invalid generation parameters."""


def validate_params(params):
    problems = []
    for key in params:
        if key not in RANGES:
            problems.append(f"{key}: unknown parameter")
    for key, (lo, hi, integral) in RANGES.items():
        if key not in params:
            problems.append(f"{key}: missing"); continue
        v = params[key]
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            problems.append(f"{key}: expected a number, got {v!r}"); continue
        if integral and int(v) != v:
            problems.append(f"{key}: expected a whole number, got {v!r}"); continue
        if (lo is not None and v < lo) or (hi is not None and v > hi):
            problems.append(f"{key}: {v!r} outside [{lo}, {hi}]")
    if not problems and params["MIN_BUILDING_HEIGHT"] > params["MAX_BUILDING_HEIGHT"]:
        problems.append("MIN_BUILDING_HEIGHT: has to be smaller than MAX_BUILDING_HEIGHT")
    if problems:
        raise ConfigError("invalid parameters: " + "; ".join(problems))
    return params


def make_params(overrides=None, **kw):
    """DEFAULT_PARAMS with ``overrides`` / keyword overrides applied, validated."""
    params = dict(DEFAULT_PARAMS)
    params.update(overrides or {})
    params.update(kw)
    return validate_params(params)
