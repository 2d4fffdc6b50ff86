from sqlalchemy import Column, Integer, Float, String, DateTime, Text, ForeignKey
from database.db import Base

class GradeRecord(Base):
    __tablename__ = "grades"  # 시험별 성적 + 승인 워크플로 상태

    id = Column(Integer, primary_key=True, index=True)                                 # 성적 고유 ID (Primary Key)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)  # 학교 ID
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    score = Column(Float)                                                              # 원점수
    max_score = Column(Float, nullable=False, default=100)                             # 만점
    percentage = Column(Float)                                                         # score / max_score × 100 (분석 단위)
    letter_grade = Column(String(10))                                                  # 성적 등급 (예: A, B+)
    status = Column(String(20), nullable=False, default="draft")                       # draft → pending_approval → approved/rejected → released
    term = Column(String(50), index=True)                                              # 학기 (학사 term id 문자열)
    exam_type = Column(String(50))                                                     # 예: MIDTERM, END_TERM
    academic_year = Column(String(50), index=True)                                     # 학년도 (학사 year id 문자열)

    # ==========================================================
    # [워크플로 기록]
    # ==========================================================
    submitted_by = Column(Integer, ForeignKey("profiles.id"))
    submitted_at = Column(DateTime(timezone=True))
    approved_by = Column(Integer, ForeignKey("profiles.id"))
    approved_at = Column(DateTime(timezone=True))
    released_at = Column(DateTime(timezone=True))
    principal_notes = Column(Text)
