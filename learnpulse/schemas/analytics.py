"""
Pydantic schemas for the engagement analytics API.
"""

from typing import Any, Optional

from pydantic import ConfigDict

from learnpulse.schemas.common import CamelModel


class EngagementSyncRequest(CamelModel):
    """
    Time sample posted by the tracker.

    Every field is loosely typed: malformed samples must be accepted and
    ignored, never rejected with a validation error.
    """

    model_config = ConfigDict(extra="ignore")

    resource_id: Optional[Any] = None
    resource_type: Optional[Any] = None
    seconds: Optional[Any] = None
    timestamp: Optional[Any] = None
    token: Optional[Any] = None
