from database.db import Base, engine

# ✅ 외래키 대상 테이블까지 메타데이터에 올라오도록 모든 모델 import
from models import (  # noqa: F401
    academic_terms, academic_years, attendance, classes, enrollments,
    examinations, grades, profiles, schools, students, subjects, teacher_assignments,
)


def init_db(bind=None):
    """테이블이 없으면 생성 (기존 테이블은 건드리지 않음)"""
    Base.metadata.create_all(bind=bind or engine)
