"""
Content Directory - material and course metadata lookups.
"""

from learnpulse.kernel.content.content_directory import (
    ContentDirectory,
    CourseInfo,
    InMemoryContentDirectory,
    MaterialInfo,
)

__all__ = [
    "ContentDirectory",
    "CourseInfo",
    "InMemoryContentDirectory",
    "MaterialInfo",
]
