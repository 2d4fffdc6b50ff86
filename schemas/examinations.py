from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date


# ✅ 생성(Create) 전용 스키마
class ExaminationCreate(BaseModel):
    school_id: int
    academic_year_id: Optional[int] = None      # 비어 있으면 현재 학년도
    term_id: Optional[int] = None               # 비어 있으면 현재 학기
    name: str                                   # 시험명
    exam_type: str                              # 예: MIDTERM
    start_date: date
    end_date: date
    class_ids: List[int] = Field(..., min_length=1)


# ✅ 조회/응답용 스키마
class Examination(ExaminationCreate):
    id: int
    academic_year_id: int
    term_id: int
    created_by: Optional[int] = None

    class Config:
        from_attributes = True
