"""Course access-control settings and per-module/lesson visibility rules."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, TypeAlias, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

RequiredStatus = Literal["COMPLETED", "STARTED", "ANY"]

DEFAULT_ALLOWED_ROLES = ("student", "mentor")


class _PrerequisiteBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    required_status: RequiredStatus = "COMPLETED"


class ModulePrerequisite(_PrerequisiteBase):
    type: Literal["module"] = "module"
    id: str = Field(min_length=1)


class LessonPrerequisite(_PrerequisiteBase):
    type: Literal["lesson"] = "lesson"
    id: str = Field(min_length=1)


class QuizPrerequisite(_PrerequisiteBase):
    type: Literal["quiz"] = "quiz"
    id: str = Field(min_length=1)


class EnrollmentPrerequisite(_PrerequisiteBase):
    type: Literal["enrollment"] = "enrollment"
    course_id: str = Field(min_length=1)


Prerequisite: TypeAlias = Annotated[
    Union[
        ModulePrerequisite,
        LessonPrerequisite,
        QuizPrerequisite,
        EnrollmentPrerequisite,
    ],
    Field(discriminator="type"),
]


def prerequisite_target(prereq: Prerequisite) -> str:
    """The id of the thing that must be satisfied, whatever its kind."""
    if isinstance(prereq, EnrollmentPrerequisite):
        return prereq.course_id
    if isinstance(prereq, (ModulePrerequisite, LessonPrerequisite, QuizPrerequisite)):
        return prereq.id
    raise TypeError(f"unknown prerequisite {prereq!r}")


class AccessRule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    resource_type: Literal["module", "lesson"]
    resource_id: str = Field(min_length=1)
    available_from: AwareDatetime | None = None
    available_until: AwareDatetime | None = None
    prerequisites: list[Prerequisite] = Field(default_factory=list)

    @model_validator(mode="after")
    def _window_is_ordered(self) -> AccessRule:
        if (
            self.available_from is not None
            and self.available_until is not None
            and self.available_until <= self.available_from
        ):
            raise ValueError("available_until must be after available_from")
        return self


class AccessControlIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_public: bool = False
    requires_enrollment: bool = True
    allowed_roles: list[Literal["admin", "instructor", "mentor", "student"]] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ROLES)
    )
    rules: list[AccessRule] = Field(default_factory=list)


class CourseAccessSettings(BaseModel):
    course_id: str
    is_public: bool = False
    requires_enrollment: bool = True
    allowed_roles: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ROLES)
    )
    rules: list[AccessRule] = Field(default_factory=list)
    updated_at: datetime | None = None
