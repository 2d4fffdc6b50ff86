from enum import Enum


class CurriculumType(str, Enum):
    """학급/학사 단위 교육과정 구분 (Standard: 점수제, CBC: 역량 수준, IGCSE: 문자 등급)"""
    STANDARD = "Standard"
    CBC = "CBC"
    IGCSE = "IGCSE"

    @classmethod
    def _missing_(cls, value):
        # 'cbc', ' igcse ' 처럼 대소문자/공백이 섞여 들어와도 허용
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


class Role(str, Enum):
    TEACHER = "teacher"
    PRINCIPAL = "principal"
    SCHOOL_OWNER = "school_owner"
    FINANCE_OFFICER = "finance_officer"
    EDUFAM_ADMIN = "edufam_admin"


class GradeStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    RELEASED = "released"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
