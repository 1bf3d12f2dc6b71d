"""Permission identifiers.

Permissions are flat strings ("<area>.<action>"). There is no hierarchy and
no wildcard; evaluation lives in application.services.authorization_service.
"""


class Permissions:
    """Known permission identifiers."""

    PLATFORM_LOGIN = "platform.login"
    PLATFORM_SCHOOL_ASSIGN = "platform.school.assign"
    SCHOOL_CREATE = "school.create"
    SCHOOL_SEED_ROLES = "school.seed_roles"
    STUDENT_CREATE = "student.create"
    STUDENT_VIEW = "student.view"
    TEACHER_CREATE = "teacher.create"
    ATTENDANCE_MARK = "attendance.mark"
    ATTENDANCE_VIEW = "attendance.view"
