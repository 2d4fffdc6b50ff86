"""
schemas/relationships.py

- 쓰기 작업 전에 실행하는 참조 무결성 검사 요청 모음
- operation 필드로 구분되는 태그드 유니언 (필드 집합은 요청 종류마다 고정)
  1) student_enrollment   : 학생 → 학급 배정
  2) subject_assignment   : 과목 → 교사 배정
  3) examination_schedule : 시험 일정 등록
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class StudentEnrollmentRequest(BaseModel):
    operation: Literal["student_enrollment"] = "student_enrollment"
    student_id: int
    class_id: int
    academic_year_id: int
    term_id: int

    model_config = ConfigDict(extra="forbid")


class SubjectAssignmentRequest(BaseModel):
    operation: Literal["subject_assignment"] = "subject_assignment"
    subject_id: int
    class_id: int
    teacher_id: int
    academic_year_id: Optional[int] = None
    term_id: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class ExaminationScheduleRequest(BaseModel):
    operation: Literal["examination_schedule"] = "examination_schedule"
    class_ids: List[int] = Field(..., min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(extra="forbid")


RelationshipVariant = Union[StudentEnrollmentRequest, SubjectAssignmentRequest, ExaminationScheduleRequest]

RelationshipRequest = Annotated[RelationshipVariant, Field(discriminator="operation")]

# dict → 알맞은 요청 타입으로 파싱할 때 사용
relationship_request_adapter = TypeAdapter(RelationshipRequest)


class RelationshipCheck(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
