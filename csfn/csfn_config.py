"""
Environment-driven settings for the csfn runtime.

  CSFN_DEBUG      any non-empty value turns on [DBG] output on stderr
  CSFN_MAX_STEPS  default step budget for Runner (positive integer)
"""
import os
import sys

DEFAULT_MAX_STEPS = 10000


def debug_enabled() -> bool:
    return bool(os.environ.get("CSFN_DEBUG"))


def max_steps() -> int:
    raw = os.environ.get("CSFN_MAX_STEPS")
    if not raw:
        return DEFAULT_MAX_STEPS
    try:
        n = int(raw.strip())
    except ValueError:
        return DEFAULT_MAX_STEPS
    return n if n > 0 else DEFAULT_MAX_STEPS


def _dbg(*parts):
    if debug_enabled():
        print("[DBG]", *parts, file=sys.stderr)
