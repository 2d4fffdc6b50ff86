import os
from datetime import date
from types import SimpleNamespace

# ✅ 앱/설정 import 전에 테스트용 환경변수 고정 (MySQL 대신 메모리 sqlite)
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["INTERNAL_API_TOKEN"] = "test-token"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import get_db
from database.init_db import init_db
from models.academic_terms import AcademicTerm
from models.academic_years import AcademicYear
from models.classes import Class
from models.enrollments import StudentEnrollment
from models.profiles import Profile
from models.schools import School
from models.students import Student
from models.subjects import Subject
from models.teacher_assignments import TeacherAssignment

TOKEN = "test-token"


# ==========================================================
# [DB] 테스트마다 새 메모리 DB
# ==========================================================
@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


# ==========================================================
# [시드] 학교 2곳, 학사 기간, 학급/과목, 사용자, 학생, 배정
# ==========================================================
@pytest.fixture()
def seed(db):
    db.add_all([
        School(id=1, name="Sunrise Academy"),
        School(id=2, name="Hilltop School"),
    ])
    db.add_all([
        AcademicYear(id=1, school_id=1, name="2025", is_current=True, curriculum_type="Standard"),
        AcademicYear(id=2, school_id=1, name="2024", is_current=False),
        AcademicYear(id=3, school_id=2, name="2025", is_current=True),
    ])
    db.add_all([
        AcademicTerm(id=1, school_id=1, academic_year_id=1, name="Term 1", is_current=True),
        AcademicTerm(id=2, school_id=1, academic_year_id=1, name="Term 2", is_current=False),
        AcademicTerm(id=3, school_id=1, academic_year_id=2, name="Term 3", is_current=False),
        AcademicTerm(id=4, school_id=2, academic_year_id=3, name="Term 1", is_current=True),
    ])
    db.add_all([
        Class(id=10, school_id=1, name="Grade 4 East", curriculum_type="Standard"),
        Class(id=11, school_id=1, name="Grade 5 East", curriculum_type="Standard"),
        Class(id=12, school_id=1, name="Grade 4 CBC", curriculum_type="CBC"),
        Class(id=13, school_id=1, name="Closed Class", curriculum_type="Standard", is_active=False),
        Class(id=20, school_id=2, name="Hilltop 1", curriculum_type="Standard"),
    ])
    db.add_all([
        Subject(id=100, school_id=1, class_id=10, name="Mathematics", code="MATH"),
        Subject(id=101, school_id=1, class_id=10, name="English", code="ENG", curriculum_type="IGCSE"),
        Subject(id=102, school_id=1, class_id=12, name="Science", code="SCI", curriculum_type="CBC"),
    ])
    db.add_all([
        Profile(id=1, name="Principal Pat", email="pat@sunrise.test", role="principal", school_id=1),
        Profile(id=2, name="Teacher Tam", email="tam@sunrise.test", role="teacher", school_id=1),
        Profile(id=3, name="Teacher Lee", email="lee@sunrise.test", role="teacher", school_id=1),
        Profile(id=4, name="Owner Ola", email="ola@sunrise.test", role="school_owner", school_id=1),
        Profile(id=5, name="Finance Fin", email="fin@sunrise.test", role="finance_officer", school_id=1),
        Profile(id=6, name="Principal Hill", email="hill@hilltop.test", role="principal", school_id=2),
    ])
    db.add_all([
        Student(id=1000, school_id=1, name="Amina"),
        Student(id=1001, school_id=1, name="Brian"),
        Student(id=1002, school_id=1, name="Chloe"),
        Student(id=1003, school_id=1, name="Daniel"),
    ])
    db.add(TeacherAssignment(
        id=1, school_id=1, teacher_id=2, class_id=10, subject_id=100,
        academic_year_id=1, term_id=1, is_active=True,
    ))
    db.add_all([
        StudentEnrollment(school_id=1, student_id=sid, class_id=10, academic_year_id=1, term_id=1, is_active=True)
        for sid in (1000, 1001, 1002)
    ])
    db.commit()

    return SimpleNamespace(
        school_id=1,
        other_school_id=2,
        year_id=1,
        term_id=1,
        class_id=10,
        next_class_id=11,
        cbc_class_id=12,
        inactive_class_id=13,
        math_id=100,
        english_id=101,
        principal_id=1,
        teacher_id=2,
        unassigned_teacher_id=3,
        owner_id=4,
        finance_id=5,
        other_principal_id=6,
        student_ids=[1000, 1001, 1002],
        unenrolled_student_id=1003,
        today=date(2025, 3, 3),
    )


# ==========================================================
# [API] TestClient + get_db 오버라이드
# ==========================================================
@pytest.fixture()
def client(db):
    from main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {TOKEN}", "X-User-Id": str(user_id)}


@pytest.fixture()
def headers():
    return auth_headers
