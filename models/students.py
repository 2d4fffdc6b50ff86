from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블 (학급 소속은 student_enrollments 로 관리)

    id = Column(Integer, primary_key=True, index=True)                                 # 고유 학생 ID (Primary Key)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)  # 학교 ID (FK)
    name = Column(String(100), nullable=False)                                         # 학생 이름
    admission_number = Column(String(50))                                              # 학번
    is_active = Column(Boolean, nullable=False, default=True)                          # 재학 여부
