from pydantic import BaseModel, Field
from typing import Any, List, Optional


# ✅ 학생 학급 배정 요청
class EnrollmentCreate(BaseModel):
    school_id: int
    student_id: int
    class_id: int
    academic_year_id: int
    term_id: int


# ✅ 과목-교사 배정 요청
class SubjectAssignmentCreate(BaseModel):
    school_id: int
    subject_id: int
    class_id: int
    teacher_id: int
    academic_year_id: int
    term_id: int


# ✅ 진급 요청 (student_ids 가 없으면 학급 전체)
class PromotionRequest(BaseModel):
    school_id: int
    from_class_id: int
    to_class_id: int
    academic_year_id: int
    term_id: int
    student_ids: Optional[List[int]] = None


# ✅ 워크플로 공통 결과 (도메인 실패는 예외가 아니라 값으로 반환)
class WorkflowResult(BaseModel):
    success: bool
    error: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
    data: Optional[Any] = None
    promoted_count: Optional[int] = None

    @classmethod
    def failed(cls, *errors: str) -> "WorkflowResult":
        return cls(success=False, error=", ".join(errors), errors=list(errors))
