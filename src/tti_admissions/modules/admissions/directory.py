"""
Course Directory

Static mapping from course to the teacher(s) responsible for it, plus the
HEAD contact. Built once from settings and injected into the workflow so
tests can supply their own.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tti_admissions.core.config import Settings
from tti_admissions.modules.admissions.errors import TeacherNotConfiguredError
from tti_admissions.modules.admissions.models import Course

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    """A person the workflow can notify."""

    name: str
    email: str | None = None
    phone: str | None = None
    push_tokens: tuple[str, ...] = field(default_factory=tuple)


def _parse_contact(raw: Any) -> Contact | None:
    if not isinstance(raw, Mapping):
        return None
    email = (raw.get("email") or "").strip() or None
    tokens = raw.get("push_tokens") or ()
    if isinstance(tokens, str):
        tokens = (tokens,)
    return Contact(
        name=(raw.get("name") or "").strip() or "Teacher",
        email=email,
        phone=(raw.get("phone") or "").strip() or None,
        push_tokens=tuple(t for t in tokens if t),
    )


class CourseDirectory:
    """Course -> teacher contacts lookup."""

    def __init__(self, teachers: Mapping[Course, list[Contact]] | None = None):
        self._teachers: dict[Course, list[Contact]] = dict(teachers or {})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CourseDirectory":
        """
        Build a directory from the settings JSON.

        Each course maps to one contact object or a list of them. Unknown
        course keys are ignored with a warning.
        """
        teachers: dict[Course, list[Contact]] = {}
        for key, value in (raw or {}).items():
            try:
                course = Course(key)
            except ValueError:
                logger.warning(f"Ignoring teacher mapping for unknown course: {key}")
                continue

            entries = value if isinstance(value, list) else [value]
            contacts = [c for c in (_parse_contact(e) for e in entries) if c is not None]
            if contacts:
                teachers[course] = contacts
        return cls(teachers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CourseDirectory":
        return cls.from_mapping(settings.course_teachers)

    def teachers_for(self, course: Course) -> list[Contact]:
        return list(self._teachers.get(course, []))

    def resolve(self, course: Course) -> list[Contact]:
        """
        Return the course's teachers that have an email address.

        Raises:
            TeacherNotConfiguredError: If no mapping exists or none has an email
        """
        contacts = [c for c in self.teachers_for(course) if c.email]
        if not contacts:
            logger.warning(f"No teacher with an email configured for course {course.value}")
            raise TeacherNotConfiguredError(course.value)
        return contacts

    def __contains__(self, course: object) -> bool:
        return course in self._teachers

    def unconfigured_courses(self) -> list[Course]:
        """Courses with no teacher mapping; HEAD_APPROVE fails for these."""
        return [course for course in Course if course not in self]


def head_contact_from_settings(settings: Settings) -> Contact:
    """Build the HEAD contact. The email may be missing; callers warn about it."""
    return Contact(
        name="Head of Admissions",
        email=settings.head_email,
        push_tokens=tuple(settings.head_push_tokens),
    )
