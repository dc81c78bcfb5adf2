from __future__ import annotations

from typing import Literal, get_args

ProfileVisibility = Literal["all_platform_users", "enrolled_only", "private"]
PROFILE_VISIBILITIES: tuple[ProfileVisibility, ...] = get_args(ProfileVisibility)

# Every key a role may set, with its default.  Keys absent from a role's
# table are silently dropped on update.
ROLE_DEFAULTS: dict[str, dict[str, bool | str]] = {
    "student": {
        "profile_visibility": "all_platform_users",
        "show_enrolled_courses": True,
        "show_achievements": True,
        "show_learning_activity": True,
        "allow_mentor_recommendations": True,
        "allow_course_recommendations": True,
        "allow_forum_tagging": True,
        "allow_profile_searching": True,
    },
    "instructor": {
        "profile_visibility": "all_platform_users",
        "show_course_statistics": True,
        "show_ratings": True,
        "show_teaching_history": True,
        "allow_student_messaging": True,
        "allow_course_feedback": True,
        "allow_profile_searching": True,
        "allow_other_instructors_to_view_materials": False,
    },
    "mentor": {
        "profile_visibility": "all_platform_users",
        "show_mentorship_statistics": True,
        "show_availability": True,
        "show_expertise_areas": True,
        "allow_mentee_messaging": True,
        "allow_mentee_reviews": True,
        "allow_profile_searching": True,
        "visible_to_non_mentees": True,
    },
}
