from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from database.db import Base

class Class(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)                                 # 학급 고유 ID (PK)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)  # 학교 ID (FK)
    name = Column(String(100), nullable=False)                                         # 학급명 (예: "Grade 4 East")
    curriculum_type = Column(String(20), nullable=False, default="Standard")           # Standard / CBC / IGCSE
    is_active = Column(Boolean, nullable=False, default=True)                          # 운영 중 여부

