"""
Kernel Layer

Foundational pieces the engines build on:
- Learner counters (single row per learner, atomic increments)
- Append-only engagement log and badge awards
- Identity collaborator (bearer credential -> learner id and role)
- Content directory collaborator (material id -> category/format)
- Error taxonomy

Invariants:
- Counter mutations are single UPDATE statements, never load-mutate-save
- Engagement logs and badge awards are facts; never mutated
- At most one award per (learner, badge), enforced by the database
"""

from learnpulse.kernel.models import (
    Learner,
    EngagementLog,
    BadgeDefinition,
    AwardedBadge,
    MaterialInteraction,
)
from learnpulse.kernel.errors import (
    EngineError,
    AuthError,
    ValidationError,
    NotFoundError,
    PersistenceError,
)

__all__ = [
    # Models
    "Learner",
    "EngagementLog",
    "BadgeDefinition",
    "AwardedBadge",
    "MaterialInteraction",
    # Errors
    "EngineError",
    "AuthError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
