from __future__ import annotations

from jobtracker.core.runtime import Tracker, get_tracker


def get_tracker_dep() -> Tracker:
    return get_tracker()
