"""Unit tests for the in-memory Content Directory."""

import json

import pytest

from learnpulse.kernel.content import CourseInfo, InMemoryContentDirectory, MaterialInfo


class TestInMemoryContentDirectory:

    @pytest.mark.asyncio
    async def test_material_registers_with_course(self):
        directory = InMemoryContentDirectory(courses=[CourseInfo(course_id="c1", title="Course")])
        directory.add_material(MaterialInfo(material_id="m1", course_id="c1"))
        directory.add_material(MaterialInfo(material_id="m1", course_id="c1"))
        course = await directory.get_course("c1")
        assert course.material_ids == ["m1"]

    @pytest.mark.asyncio
    async def test_unknown_material(self):
        assert await InMemoryContentDirectory().get_material("missing") is None

    def test_quiz_detection_is_case_insensitive(self):
        assert MaterialInfo(material_id="q", category=" QUIZ ").is_quiz is True
        assert MaterialInfo(material_id="v", category="Video").is_quiz is False

    @pytest.mark.asyncio
    async def test_from_catalog(self, tmp_path):
        catalog = tmp_path / "catalog.json"
        catalog.write_text(json.dumps({
            "courses": [
                {
                    "id": "c1",
                    "title": "Statistics",
                    "materials": [
                        {"id": "m1", "category": "Video"},
                        {"id": "m2", "category": "Quiz", "format": "Verbal"},
                    ],
                }
            ]
        }))
        directory = InMemoryContentDirectory.from_catalog(str(catalog))
        course = await directory.get_course("c1")
        assert course.title == "Statistics"
        assert course.material_ids == ["m1", "m2"]
        quiz = await directory.get_material("m2")
        assert quiz.is_quiz
        assert quiz.format == "Verbal"
        assert quiz.course_id == "c1"
