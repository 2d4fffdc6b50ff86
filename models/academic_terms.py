from sqlalchemy import Column, Integer, String, Boolean, Date, ForeignKey
from database.db import Base

class AcademicTerm(Base):
    __tablename__ = "academic_terms"  # 학기 테이블 (학교당 현재 학기 1개)

    id = Column(Integer, primary_key=True, index=True)                                               # 학기 고유 ID (PK)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)                # 학교 ID (FK)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id"), nullable=False, index=True)  # 학년도 ID (FK)
    name = Column(String(50), nullable=False)                                                        # 예: "Term 1"
    start_date = Column(Date)
    end_date = Column(Date)
    is_current = Column(Boolean, nullable=False, default=False)                                      # 현재 학기 여부
    curriculum_type = Column(String(20))                                                             # 선택 값

