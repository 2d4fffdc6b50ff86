from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base

class Subject(Base):
    __tablename__ = "subjects"  # 과목 정보 테이블

    id = Column(Integer, primary_key=True, index=True)                                 # 과목 고유 ID (Primary Key)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)  # 학교 ID (FK)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)   # 소속 학급 ID (FK)
    name = Column(String(100), nullable=False)                                         # 과목 이름 (예: 수학, 영어)
    code = Column(String(20))                                                          # 과목 코드
    curriculum_type = Column(String(20))                                               # 선택 값 (일관성 검사용)

