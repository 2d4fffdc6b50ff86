from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base

class Profile(Base):
    __tablename__ = "profiles"  # 로그인 사용자 프로필 (교사/교장/학교 소유자/재무/관리자)

    id = Column(Integer, primary_key=True, index=True)                   # 사용자 고유 ID (PK)
    name = Column(String(100), nullable=False)                           # 이름
    email = Column(String(100), unique=True)                             # 이메일
    role = Column(String(50), nullable=False)                            # 역할 (models.enums.Role 값)
    school_id = Column(Integer, ForeignKey("schools.id"), index=True)    # 소속 학교 ID (FK)
