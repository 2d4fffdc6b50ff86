from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from models.enums import CurriculumType


# ✅ 요청마다 만들어졌다 버려지는 학사 컨텍스트 (DB 저장 없음)
class AcademicContext(BaseModel):
    school_id: int                                   # 학교 ID (필수)
    academic_year_id: Optional[int] = None           # 비어 있으면 현재 학년도로 채움
    term_id: Optional[int] = None                    # 비어 있으면 현재 학기로 채움
    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    curriculum_type: Optional[CurriculumType] = None  # 호출 측이 기대하는 교육과정


# ✅ 현재 학사 기간 (학년도 + 학기)
class CurrentPeriod(BaseModel):
    academic_year_id: int
    term_id: int


class ContextResolution(BaseModel):
    context: AcademicContext
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CurriculumCheck(BaseModel):
    is_consistent: bool
    curriculum_type: Optional[CurriculumType] = None
    errors: List[str] = Field(default_factory=list)
    # 레벨별 관측 값 (academic_year / term / class / subject / expected) - 진단 표시용
    curriculum_types: Dict[str, Optional[str]] = Field(default_factory=dict)


class CurriculumDisplayInfo(BaseModel):
    name: str
    description: str
    grading_system: str
    color: str


# ==========================================================
# [권한 검사] 입력/출력
# ==========================================================
class ScopeCheckRequest(BaseModel):
    context: AcademicContext
    operation: str                                   # 예: enter_grades, approve_grades

    @field_validator("operation")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class ScopeCheck(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    role: Optional[str] = None


class PermissionCheckRequest(BaseModel):
    school_id: int
    operation: str


class PermissionCheck(BaseModel):
    can_perform: bool
    error: Optional[str] = None
