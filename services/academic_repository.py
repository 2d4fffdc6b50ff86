"""
services/academic_repository.py

학사 엔진이 저장소에 보내는 읽기 쿼리 모음.
- 모든 조회는 school_id 등 범위 파라미터를 받는 단건/목록 조회
- 행이 없으면 None / 빈 리스트를 돌려주고, DB 장애(SQLAlchemyError)는 그대로 전파
"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.academic_terms import AcademicTerm
from models.academic_years import AcademicYear
from models.classes import Class
from models.enrollments import StudentEnrollment
from models.grades import GradeRecord
from models.attendance import AttendanceRecord
from models.profiles import Profile
from models.students import Student
from models.subjects import Subject
from models.teacher_assignments import TeacherAssignment


class AcademicRepository:
    def __init__(self, db: Session):
        self.db = db

    # ==================== 프로필 ====================

    def get_profile(self, user_id: int) -> Optional[Profile]:
        return self.db.get(Profile, user_id)

    # ==================== 학사 기간 ====================

    def get_year(self, year_id: int, school_id: Optional[int] = None) -> Optional[AcademicYear]:
        stmt = select(AcademicYear).where(AcademicYear.id == year_id)
        if school_id is not None:
            stmt = stmt.where(AcademicYear.school_id == school_id)
        return self.db.execute(stmt).scalars().first()

    def get_term(self, term_id: int, school_id: Optional[int] = None) -> Optional[AcademicTerm]:
        stmt = select(AcademicTerm).where(AcademicTerm.id == term_id)
        if school_id is not None:
            stmt = stmt.where(AcademicTerm.school_id == school_id)
        return self.db.execute(stmt).scalars().first()

    def current_years(self, school_id: int) -> List[AcademicYear]:
        stmt = (
            select(AcademicYear)
            .where(AcademicYear.school_id == school_id, AcademicYear.is_current.is_(True))
            .order_by(AcademicYear.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def current_terms(self, school_id: int) -> List[AcademicTerm]:
        stmt = (
            select(AcademicTerm)
            .where(AcademicTerm.school_id == school_id, AcademicTerm.is_current.is_(True))
            .order_by(AcademicTerm.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== 학급 / 과목 ====================

    def get_class(self, class_id: int, school_id: Optional[int] = None) -> Optional[Class]:
        stmt = select(Class).where(Class.id == class_id)
        if school_id is not None:
            stmt = stmt.where(Class.school_id == school_id)
        return self.db.execute(stmt).scalars().first()

    def existing_class_ids(self, class_ids: Iterable[int]) -> set:
        ids = list(class_ids)
        if not ids:
            return set()
        stmt = select(Class.id).where(Class.id.in_(ids))
        return set(self.db.execute(stmt).scalars().all())

    def get_subject(self, subject_id: int, school_id: Optional[int] = None) -> Optional[Subject]:
        stmt = select(Subject).where(Subject.id == subject_id)
        if school_id is not None:
            stmt = stmt.where(Subject.school_id == school_id)
        return self.db.execute(stmt).scalars().first()

    def get_student(self, student_id: int) -> Optional[Student]:
        return self.db.get(Student, student_id)

    # ==================== 배정 ====================

    def find_teacher_assignment(
        self,
        teacher_id: int,
        class_id: int,
        subject_id: int,
        academic_year_id: int,
        term_id: int,
    ) -> Optional[TeacherAssignment]:
        stmt = select(TeacherAssignment).where(
            TeacherAssignment.teacher_id == teacher_id,
            TeacherAssignment.class_id == class_id,
            TeacherAssignment.subject_id == subject_id,
            TeacherAssignment.academic_year_id == academic_year_id,
            TeacherAssignment.term_id == term_id,
            TeacherAssignment.is_active.is_(True),
        )
        return self.db.execute(stmt).scalars().first()

    def active_enrollments(self, class_id: int, student_ids: Optional[List[int]] = None) -> List[StudentEnrollment]:
        stmt = select(StudentEnrollment).where(
            StudentEnrollment.class_id == class_id,
            StudentEnrollment.is_active.is_(True),
        )
        if student_ids is not None:
            stmt = stmt.where(StudentEnrollment.student_id.in_(student_ids))
        return list(self.db.execute(stmt.order_by(StudentEnrollment.id)).scalars().all())

    # ==================== 성적 / 출결 ====================

    def grade_rows(
        self,
        school_id: int,
        academic_year: Optional[str] = None,
        term: Optional[str] = None,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> list:
        """
        성적 + 학생/과목/학급 이름을 한 번에 조회 (분석용).
        반환: (GradeRecord, student_name, subject_name, class_name) 튜플 목록, id 오름차순
        """
        stmt = (
            select(GradeRecord, Student.name, Subject.name, Class.name)
            .join(Student, Student.id == GradeRecord.student_id)
            .join(Subject, Subject.id == GradeRecord.subject_id)
            .join(Class, Class.id == GradeRecord.class_id)
            .where(GradeRecord.school_id == school_id)
        )
        if academic_year is not None:
            stmt = stmt.where(GradeRecord.academic_year == academic_year)
        if term is not None:
            stmt = stmt.where(GradeRecord.term == term)
        if class_id is not None:
            stmt = stmt.where(GradeRecord.class_id == class_id)
        if subject_id is not None:
            stmt = stmt.where(GradeRecord.subject_id == subject_id)
        return list(self.db.execute(stmt.order_by(GradeRecord.id)).all())

    def attendance_rows(self, school_id: int, start=None, end=None, class_id: Optional[int] = None) -> list:
        """출결 + 학급 이름 (AttendanceRecord, class_name) 튜플 목록"""
        stmt = (
            select(AttendanceRecord, Class.name)
            .join(Class, Class.id == AttendanceRecord.class_id)
            .where(AttendanceRecord.school_id == school_id)
        )
        if start is not None:
            stmt = stmt.where(AttendanceRecord.date >= start)
        if end is not None:
            stmt = stmt.where(AttendanceRecord.date <= end)
        if class_id is not None:
            stmt = stmt.where(AttendanceRecord.class_id == class_id)
        return list(self.db.execute(stmt.order_by(AttendanceRecord.date, AttendanceRecord.id)).all())
