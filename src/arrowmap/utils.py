from __future__ import annotations

import os
from typing import Tuple

# Fixed call target of the rewrite: ::sugars_macros::hash_map_fn!( (k, v), ... )
TARGET_PATH: Tuple[str, ...] = ("sugars_macros", "hash_map_fn")
TARGET_IS_MACRO = True

# Two-character key/value separator.
ARROW = ("=", ">")

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def strict_from_env() -> bool:
    """Default mode for the command-line tools; the pass itself never reads this."""
    return env_flag("ARROWMAP_STRICT")


def debug_py_trace_enabled() -> bool:
    return env_flag("ARROWMAP_DEBUG_PY_TRACE")
