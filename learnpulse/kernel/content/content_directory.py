"""
Content Directory collaborator.

Course and material CRUD live in another subsystem. The engine only needs to
know a material's category/format and which materials make up a course.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from learnpulse.logging_config import get_logger

logger = get_logger(__name__)


class MaterialInfo(BaseModel):
    """Metadata for a single material."""

    material_id: str
    course_id: Optional[str] = None
    title: str = ""
    category: str = "Video"
    format: str = "Visual"

    @property
    def is_quiz(self) -> bool:
        return self.category.strip().lower() == "quiz"


class CourseInfo(BaseModel):
    """A course and the ordered ids of its materials."""

    course_id: str
    title: str = ""
    material_ids: List[str] = Field(default_factory=list)


class ContentDirectory(Protocol):
    """Contract of the Content Directory collaborator."""

    async def get_material(self, material_id: str) -> Optional[MaterialInfo]:
        ...

    async def get_course(self, course_id: str) -> Optional[CourseInfo]:
        ...


class InMemoryContentDirectory:
    """Dictionary-backed directory, populated at bootstrap or from a JSON catalog."""

    def __init__(
        self,
        materials: Optional[List[MaterialInfo]] = None,
        courses: Optional[List[CourseInfo]] = None,
    ):
        self._materials: Dict[str, MaterialInfo] = {}
        self._courses: Dict[str, CourseInfo] = {}
        for course in courses or []:
            self.add_course(course)
        for material in materials or []:
            self.add_material(material)

    def add_course(self, course: CourseInfo) -> None:
        self._courses[course.course_id] = course

    def add_material(self, material: MaterialInfo) -> None:
        self._materials[material.material_id] = material
        if material.course_id:
            course = self._courses.setdefault(
                material.course_id, CourseInfo(course_id=material.course_id)
            )
            if material.material_id not in course.material_ids:
                course.material_ids.append(material.material_id)

    async def get_material(self, material_id: str) -> Optional[MaterialInfo]:
        return self._materials.get(material_id)

    async def get_course(self, course_id: str) -> Optional[CourseInfo]:
        return self._courses.get(course_id)

    @classmethod
    def from_catalog(cls, path: str) -> "InMemoryContentDirectory":
        """
        Load a JSON catalog of the form:

            {"courses": [{"id": "c1", "title": "...",
                          "materials": [{"id": "m1", "category": "Quiz", "format": "Visual"}]}]}
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        directory = cls()
        for course in data.get("courses", []):
            course_id = str(course["id"])
            directory.add_course(CourseInfo(course_id=course_id, title=course.get("title", "")))
            for material in course.get("materials", []):
                directory.add_material(
                    MaterialInfo(
                        material_id=str(material["id"]),
                        course_id=course_id,
                        title=material.get("title", ""),
                        category=material.get("category", "Video"),
                        format=material.get("format", "Visual"),
                    )
                )
        logger.info(
            "Loaded content catalog",
            extra={"path": path, "courses": len(directory._courses), "materials": len(directory._materials)},
        )
        return directory
