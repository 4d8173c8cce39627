"""
Engagement Engine - server-side ingestion of client time samples.
"""

from learnpulse.engines.engagement.ingestion import (
    MAX_SAMPLE_SECONDS,
    EngagementIngestionService,
    EngagementSample,
    build_sample,
    coerce_seconds,
    parse_timestamp,
)

__all__ = [
    "MAX_SAMPLE_SECONDS",
    "EngagementIngestionService",
    "EngagementSample",
    "build_sample",
    "coerce_seconds",
    "parse_timestamp",
]
