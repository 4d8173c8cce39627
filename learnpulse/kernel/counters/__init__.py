"""
Counter Core - atomic learner writes.
"""

from learnpulse.kernel.counters.learner_store import (
    compare_and_swap,
    ensure_learner,
    increment_counters,
    insert_ignore,
    load_learner,
    read_xp,
)

__all__ = [
    "compare_and_swap",
    "ensure_learner",
    "increment_counters",
    "insert_ignore",
    "load_learner",
    "read_xp",
]
