from sqlalchemy import Column, Integer, String, Date, JSON, ForeignKey
from database.db import Base

class Examination(Base):
    __tablename__ = "examinations"  # 시험 일정 테이블

    id = Column(Integer, primary_key=True, index=True)                                 # 시험 고유 ID
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)                                         # 시험명
    exam_type = Column(String(50))                                                     # 예: MIDTERM
    academic_year_id = Column(Integer, ForeignKey("academic_years.id"))
    term_id = Column(Integer, ForeignKey("academic_terms.id"))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    class_ids = Column(JSON, nullable=False, default=list)                             # 시험 대상 학급 ID 목록
    created_by = Column(Integer, ForeignKey("profiles.id"))
