from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional
from datetime import date

from models.enums import AttendanceStatus


# ✅ 분석 대상 출결 한 건
class AttendanceRecord(BaseModel):
    id: Optional[int] = None
    student_id: int
    class_id: int
    school_id: Optional[int] = None
    date: date                                  # 날짜
    status: str                                 # present / absent / late / excused
    session: Optional[str] = "full-day"
    academic_year: Optional[str] = None
    term: Optional[str] = None
    class_name: Optional[str] = None            # 표시용 (조인)

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class WeeklyTrend(BaseModel):
    week_start: date                            # 주 시작일 (일요일)
    week_end: date
    attendance_rate: int
    trend_direction: Literal["up", "down", "stable"] = "stable"


class ClassAttendanceSummary(BaseModel):
    class_id: int
    class_name: str
    student_count: int
    attendance_rate: int
    chronic_absentees: int                      # 출석률 80% 미만 학생 수
    perfect_attendance: int                     # 출석률 100% 학생 수


class AttendanceSummary(BaseModel):
    overall_attendance_percentage: int = 0
    total_students: int = 0
    total_school_days: int = 0
    present_count: int = 0
    absent_count: int = 0
    late_count: int = 0
    excused_count: int = 0
    trend: Literal["improving", "declining", "stable"] = "stable"
    weekly_trends: List[WeeklyTrend] = Field(default_factory=list)
    class_summaries: List[ClassAttendanceSummary] = Field(default_factory=list)


class AttendanceAlerts(BaseModel):
    chronic_absenteeism: int
    declining_classes: List[str]
    perfect_attendance_students: int


class AttendanceInsights(BaseModel):
    key_metrics: Dict[str, int]
    recommendations: List[str] = Field(default_factory=list)
    trends: List[str] = Field(default_factory=list)


# ==========================================================
# [입력] 출결 기록 요청
# ==========================================================
class AttendanceEntry(BaseModel):
    student_id: int
    date: date
    status: AttendanceStatus
    session: str = "full-day"


class AttendanceRecordRequest(BaseModel):
    school_id: int
    academic_year_id: Optional[int] = None
    term_id: Optional[int] = None
    class_id: int
    entries: List[AttendanceEntry] = Field(..., min_length=1)
