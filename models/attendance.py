from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from database.db import Base

class AttendanceRecord(Base):
    __tablename__ = "attendance"  # 출결 기록 테이블
    __table_args__ = (
        UniqueConstraint("school_id", "class_id", "student_id", "date", "session", name="uq_attendance_slot"),
    )

    id = Column(Integer, primary_key=True, index=True)                                 # 출결 고유 ID (Primary Key)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)            # 학생 ID
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)                                                # 날짜
    status = Column(String(20), nullable=False)                                        # present / absent / late / excused
    session = Column(String(20), nullable=False, default="full-day")                   # morning / afternoon / full-day
    academic_year = Column(String(50))
    term = Column(String(50))
    submitted_by = Column(Integer, ForeignKey("profiles.id"))
    submitted_at = Column(DateTime(timezone=True))
