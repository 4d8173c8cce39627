"""
Client Library - engagement tracking for learner-facing frontends.
"""

from learnpulse.client.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from learnpulse.client.transport import EngagementTransport, HttpEngagementTransport
from learnpulse.client.tracker import EngagementTracker

__all__ = [
    "AsyncioScheduler",
    "Scheduler",
    "TimerHandle",
    "EngagementTransport",
    "HttpEngagementTransport",
    "EngagementTracker",
]
