from sqlalchemy import Column, Integer, String, Boolean
from database.db import Base

class School(Base):
    __tablename__ = "schools"  # 학교(테넌트) 테이블

    id = Column(Integer, primary_key=True, index=True)       # 학교 고유 ID (PK)
    name = Column(String(200), nullable=False)               # 학교명
    is_active = Column(Boolean, nullable=False, default=True)
