from models.academic_terms import AcademicTerm
from models.academic_years import AcademicYear
from models.schools import School
from schemas.context import AcademicContext
from services.academic_context import (
    INVALID_ACADEMIC_TERM,
    INVALID_CLASS,
    INVALID_SUBJECT,
    NO_CURRENT_PERIOD,
    SUBJECT_NOT_IN_CLASS,
    TERM_NOT_CURRENT,
    TERM_NOT_IN_YEAR,
    YEAR_NOT_CURRENT,
    check_curriculum_consistency,
    curriculum_display_info,
    get_current_period,
    resolve_context,
)
from services.academic_periods import set_current_term, set_current_year


# ==========================================================
# [현재 학사 기간]
# ==========================================================
def test_current_period_for_school(db, seed):
    period = get_current_period(db, seed.school_id)
    assert (period.academic_year_id, period.term_id) == (1, 1)


def test_no_current_period_returns_none(db, seed):
    db.add(School(id=3, name="New School"))
    db.add(AcademicYear(id=9, school_id=3, name="2025", is_current=False))
    db.commit()

    assert get_current_period(db, 3) is None


def test_resolve_fills_current_period(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, class_id=10, subject_id=100))

    assert resolution.is_valid
    assert resolution.context.academic_year_id == 1
    assert resolution.context.term_id == 1
    assert resolution.context.curriculum_type.value == "Standard"
    assert resolution.warnings == []


def test_resolve_without_current_period_does_not_guess(db, seed):
    db.add(School(id=3, name="New School"))
    db.add(AcademicYear(id=9, school_id=3, name="2025", is_current=False))
    db.add(AcademicTerm(id=9, school_id=3, academic_year_id=9, name="Term 1", is_current=False))
    db.commit()

    resolution = resolve_context(db, AcademicContext(school_id=3))

    assert not resolution.is_valid
    assert NO_CURRENT_PERIOD in resolution.errors
    assert resolution.context.academic_year_id is None
    assert resolution.context.term_id is None


def test_resolve_rejects_foreign_class_and_subject(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, class_id=20, subject_id=999))

    assert not resolution.is_valid
    assert INVALID_CLASS in resolution.errors
    assert INVALID_SUBJECT in resolution.errors


def test_resolve_rejects_subject_from_other_class(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, class_id=11, subject_id=100))
    assert resolution.errors == [SUBJECT_NOT_IN_CLASS]


def test_resolve_term_must_belong_to_year(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, academic_year_id=1, term_id=3))

    assert TERM_NOT_IN_YEAR in resolution.errors
    assert TERM_NOT_CURRENT in resolution.warnings


def test_resolve_term_from_other_school_is_invalid(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, academic_year_id=1, term_id=4))
    assert resolution.errors == [INVALID_ACADEMIC_TERM]


def test_resolve_warns_on_non_current_supplied_period(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, academic_year_id=1, term_id=2))

    assert resolution.is_valid
    assert resolution.warnings == [TERM_NOT_CURRENT]

    resolution = resolve_context(db, AcademicContext(school_id=1, academic_year_id=2, term_id=3))
    assert resolution.is_valid
    assert resolution.warnings == [YEAR_NOT_CURRENT, TERM_NOT_CURRENT]


def test_resolve_reports_expected_curriculum_mismatch(db, seed):
    resolution = resolve_context(db, AcademicContext(school_id=1, class_id=12, curriculum_type="IGCSE"))

    assert not resolution.is_valid
    assert resolution.errors == ["Class curriculum type (CBC) does not match expected type (IGCSE)"]


# ==========================================================
# [교육과정 일관성]
# ==========================================================
def test_curriculum_consistent_chain(db, seed):
    check = check_curriculum_consistency(
        db, AcademicContext(school_id=1, academic_year_id=1, term_id=1, class_id=10, subject_id=100)
    )

    assert check.is_consistent
    assert check.curriculum_type.value == "Standard"
    assert check.curriculum_types["academic_year"] == "Standard"
    assert check.curriculum_types["term"] is None


def test_cbc_class_in_standard_year_is_inconsistent(db, seed):
    check = check_curriculum_consistency(
        db, AcademicContext(school_id=1, academic_year_id=1, term_id=1, class_id=12)
    )

    assert not check.is_consistent
    assert check.curriculum_type.value == "CBC"
    assert check.errors == ["Academic year curriculum type (Standard) does not match class curriculum type (CBC)"]


def test_subject_curriculum_mismatch_names_both_values(db, seed):
    check = check_curriculum_consistency(db, AcademicContext(school_id=1, class_id=10, subject_id=101))

    assert not check.is_consistent
    assert check.errors == ["Subject curriculum type (IGCSE) does not match class curriculum type (Standard)"]


def test_without_class_first_observed_level_is_reference(db, seed):
    check = check_curriculum_consistency(
        db, AcademicContext(school_id=1, academic_year_id=1, subject_id=101)
    )

    assert not check.is_consistent
    assert check.curriculum_type.value == "Standard"
    assert check.errors == ["Subject curriculum type (IGCSE) does not match academic year curriculum type (Standard)"]


def test_curriculum_display_info_defaults_to_standard():
    assert curriculum_display_info("cbc").name.startswith("Competency-Based")
    assert curriculum_display_info("unknown").name == "Standard Curriculum"
    assert curriculum_display_info(None).color == "green"


# ==========================================================
# [현재 기간 변경]
# ==========================================================
def test_set_current_term_keeps_single_current_row(db, seed):
    result = set_current_term(db, seed.school_id, 2)

    assert result.success
    current = db.query(AcademicTerm).filter(AcademicTerm.school_id == 1, AcademicTerm.is_current.is_(True)).all()
    assert [t.id for t in current] == [2]
    # 다른 학교의 현재 학기는 그대로
    assert db.get(AcademicTerm, 4).is_current


def test_set_current_year_rejects_other_school_row(db, seed):
    result = set_current_year(db, seed.school_id, 3)

    assert not result.success
    assert result.error == "Academic year not found for this school"
    assert db.get(AcademicYear, 1).is_current
