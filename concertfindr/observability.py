"""In-process counters, upstream timings and structured event lines.

Everything lives in module-level buffers behind one lock; ``snapshot()`` is
what the debug health route returns.
"""

from __future__ import annotations

import json
import sys
import time
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from threading import Lock

from concertfindr.settings import OBSERVABILITY_BUFFER_SIZE

_COUNTERS: dict[str, int] = {}
_TIMINGS: dict[str, dict] = {}
_FAILURES: deque[dict] = deque(maxlen=OBSERVABILITY_BUFFER_SIZE)
_EVENTS: deque[dict] = deque(maxlen=OBSERVABILITY_BUFFER_SIZE)
_LOCK = Lock()
_STARTED = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _emit(line: dict) -> None:
    # stderr, so CLI output on stdout stays machine-readable.
    print(json.dumps(line, ensure_ascii=True, default=str), file=sys.stderr, flush=True)


def increment(metric: str, value: int = 1) -> None:
    with _LOCK:
        _COUNTERS[metric] = _COUNTERS.get(metric, 0) + value


def observe(metric: str, elapsed_ms: float) -> None:
    """Fold one duration into the count/total/max summary for ``metric``."""
    with _LOCK:
        summary = _TIMINGS.setdefault(metric, {"count": 0, "total_ms": 0.0, "max_ms": 0.0})
        summary["count"] += 1
        summary["total_ms"] += elapsed_ms
        summary["max_ms"] = max(summary["max_ms"], elapsed_ms)


@contextmanager
def timed(metric: str):
    """Time the enclosed block, including blocks that raise."""
    start = time.perf_counter()
    try:
        yield
    finally:
        observe(metric, (time.perf_counter() - start) * 1000)


def log_event(kind: str, **fields) -> None:
    """Print one JSON line for ``kind`` and remember it."""
    line = {"ts": _now(), "kind": kind, **fields}
    with _LOCK:
        _EVENTS.append(line)
    _emit(line)


def record_failure(component: str, reason: str, **fields) -> None:
    """Remember a failure and bump ``<component>.failures``."""
    line = {"ts": _now(), "component": component, "reason": reason, **fields}
    with _LOCK:
        _FAILURES.append(line)
        key = f"{component}.failures"
        _COUNTERS[key] = _COUNTERS.get(key, 0) + 1
    _emit({"kind": "failure", **line})


def snapshot() -> dict:
    with _LOCK:
        timings = {
            metric: {
                "count": s["count"],
                "avg_ms": round(s["total_ms"] / s["count"], 1) if s["count"] else 0.0,
                "max_ms": round(s["max_ms"], 1),
            }
            for metric, s in _TIMINGS.items()
        }
        return {
            "ts": _now(),
            "uptime_seconds": int(time.monotonic() - _STARTED),
            "counters": dict(_COUNTERS),
            "timings": timings,
            "recent_failures": list(_FAILURES),
            "recent_events": list(_EVENTS),
        }


def reset() -> None:
    """Forget all counters, timings and buffered lines (tests use this)."""
    with _LOCK:
        _COUNTERS.clear()
        _TIMINGS.clear()
        _FAILURES.clear()
        _EVENTS.clear()
