from sqlalchemy import Column, Integer, String, Boolean, Date, ForeignKey
from database.db import Base

class AcademicYear(Base):
    """
    학교별 학년도.
    - 학교당 is_current = True 인 행은 정확히 하나 (services/academic_periods.py 만 이 플래그를 씀)
    - curriculum_type 은 선택 값이며, 지정되어 있으면 교육과정 일관성 검사에 사용
    """
    __tablename__ = "academic_years"

    id = Column(Integer, primary_key=True, index=True)                                 # 학년도 고유 ID (PK)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)  # 학교 ID (FK)
    name = Column(String(50), nullable=False)                                          # 예: "2025"
    start_date = Column(Date)
    end_date = Column(Date)
    is_current = Column(Boolean, nullable=False, default=False)                        # 현재 학년도 여부
    curriculum_type = Column(String(20))                                               # Standard / CBC / IGCSE

