from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Literal, Optional

from models.enums import GradeStatus

TrendDirection = Literal["up", "down", "stable"]


# ==========================================================
# [입력] 분석 대상 성적 행
# ==========================================================
class GradeRecord(BaseModel):
    """
    분석 단위가 되는 성적 한 건.
    percentage 가 비어 있고 max_score > 0 이면 score / max_score × 100 으로 채운다.
    """
    id: Optional[int] = None
    student_id: int
    subject_id: int
    class_id: int
    school_id: Optional[int] = None
    score: Optional[float] = None
    max_score: Optional[float] = 100
    percentage: Optional[float] = None
    letter_grade: Optional[str] = None
    status: Optional[str] = GradeStatus.DRAFT.value
    term: Optional[str] = None
    exam_type: Optional[str] = None
    academic_year: Optional[str] = None

    # 조인으로 얻는 표시용 이름 (없으면 Unknown 으로 표시)
    student_name: Optional[str] = None
    subject_name: Optional[str] = None
    class_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @model_validator(mode="after")
    def _derive_percentage(self):
        if self.percentage is None and self.score is not None and self.max_score:
            self.percentage = self.score / self.max_score * 100
        return self


class GradeFilters(BaseModel):
    academic_year: Optional[str] = None
    term: Optional[str] = None
    class_id: Optional[int] = None


# ==========================================================
# [출력] 성적 요약 (대시보드)
# ==========================================================
class GradeDistribution(BaseModel):
    excellent: int = 0            # 80% 이상
    good: int = 0                 # 70 ~ 79%
    satisfactory: int = 0         # 60 ~ 69%
    needs_improvement: int = 0    # 40 ~ 59%
    failing: int = 0              # 40% 미만


class SubjectPerformance(BaseModel):
    subject_id: int
    subject_name: str
    average_score: int
    grade_count: int
    improvement_trend: TrendDirection
    difficulty_index: float


class ClassPerformance(BaseModel):
    class_id: int
    class_name: str
    student_count: int
    average_percentage: int
    top_student: str
    top_student_id: Optional[int] = None
    improvement_rate: int


class WorkflowStatus(BaseModel):
    pending_approval: int = 0
    approved: int = 0
    rejected: int = 0
    released: int = 0
    draft: int = 0


class PerformanceTrend(BaseModel):
    period: str                   # "{term}-{exam_type}"
    average_score: int
    trend_direction: TrendDirection = "stable"


class TopPerformer(BaseModel):
    student_id: int
    student_name: str
    overall_percentage: int
    subject_count: int


class UnderPerformer(BaseModel):
    student_id: int
    student_name: str
    overall_percentage: int
    failing_subjects: int
    improvement_potential: int


class GradesSummary(BaseModel):
    overall_average: int = 0
    total_grades: int = 0
    grade_distribution: GradeDistribution = Field(default_factory=GradeDistribution)
    subject_performance: List[SubjectPerformance] = Field(default_factory=list)
    class_performance: List[ClassPerformance] = Field(default_factory=list)
    workflow_status: WorkflowStatus = Field(default_factory=WorkflowStatus)
    performance_trends: List[PerformanceTrend] = Field(default_factory=list)
    top_performers: List[TopPerformer] = Field(default_factory=list)
    underperformers: List[UnderPerformer] = Field(default_factory=list)


class GradesInsights(BaseModel):
    key_metrics: Dict[str, int]
    recommendations: List[str] = Field(default_factory=list)
    alerts: List[str] = Field(default_factory=list)


class GradesSummaryRequest(BaseModel):
    records: List[GradeRecord]
    filters: Optional[GradeFilters] = None


# ==========================================================
# [입력] 성적 입력 / 승인 워크플로
# ==========================================================
class GradeEntry(BaseModel):
    student_id: int
    score: float = Field(..., ge=0)
    max_score: float = Field(100, gt=0)
    exam_type: str


class GradeEntryRequest(BaseModel):
    school_id: int
    academic_year_id: Optional[int] = None
    term_id: Optional[int] = None
    class_id: int
    subject_id: int
    entries: List[GradeEntry] = Field(..., min_length=1)


class GradeIdsRequest(BaseModel):
    school_id: int
    grade_ids: List[int] = Field(..., min_length=1)
    principal_notes: Optional[str] = None


class GradeRejectRequest(BaseModel):
    school_id: int
    grade_ids: List[int] = Field(..., min_length=1)
    rejection_reason: str


class GradeOverrideRequest(BaseModel):
    school_id: int
    new_score: float = Field(..., ge=0)
    principal_notes: Optional[str] = None
