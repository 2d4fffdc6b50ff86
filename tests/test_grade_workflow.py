import pytest

from models.grades import GradeRecord as GradeModel
from services.grade_workflow import (
    GRADE_NOT_FOUND,
    SCORE_ABOVE_MAX,
    approve_grades,
    can_transition,
    letter_grade_for,
    override_grade,
    reject_grades,
    release_grades,
    submit_for_approval,
)
from models.enums import GradeStatus


@pytest.fixture()
def grades(db, seed):
    rows = [
        GradeModel(id=1, school_id=1, student_id=1000, subject_id=100, class_id=10, score=80, percentage=80,
                   status="draft", submitted_by=seed.teacher_id, term="1", academic_year="1"),
        GradeModel(id=2, school_id=1, student_id=1001, subject_id=100, class_id=10, score=55, percentage=55,
                   status="draft", submitted_by=seed.unassigned_teacher_id, term="1", academic_year="1"),
        GradeModel(id=3, school_id=1, student_id=1002, subject_id=100, class_id=10, score=70, percentage=70,
                   status="pending_approval", submitted_by=seed.teacher_id, term="1", academic_year="1"),
        GradeModel(id=4, school_id=1, student_id=1000, subject_id=100, class_id=10, score=90, percentage=90,
                   status="approved", submitted_by=seed.teacher_id, term="1", academic_year="1"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.mark.parametrize("percentage, letter", [
    (95, "A+"), (90, "A+"), (89.9, "A"), (80, "A"), (72, "B+"), (60, "B"),
    (55, "C+"), (40, "C"), (35, "D+"), (20, "D"), (19.5, "E"), (None, "E"),
])
def test_letter_grade_scale(percentage, letter):
    assert letter_grade_for(percentage) == letter


def test_transition_graph():
    assert can_transition("draft", GradeStatus.PENDING_APPROVAL)
    assert can_transition("pending_approval", GradeStatus.REJECTED)
    assert can_transition("approved", GradeStatus.RELEASED)
    assert not can_transition("draft", GradeStatus.APPROVED)
    assert not can_transition("released", GradeStatus.DRAFT)
    assert not can_transition("archived", GradeStatus.APPROVED)


def test_teacher_submits_only_own_drafts(db, grades, seed):
    result = submit_for_approval(db, seed.teacher_id, 1, [1, 2, 3])

    assert result.data["updated_ids"] == [1]
    assert result.data["skipped_ids"] == [2, 3]
    assert db.get(GradeModel, 1).status == "pending_approval"
    assert db.get(GradeModel, 1).submitted_at is not None
    assert db.get(GradeModel, 2).status == "draft"


def test_approve_only_pending_rows(db, grades, seed):
    result = approve_grades(db, seed.principal_id, 1, [1, 3, 4], principal_notes="ok")

    assert result.data["updated_count"] == 1
    row = db.get(GradeModel, 3)
    assert row.status == "approved"
    assert row.approved_by == seed.principal_id
    assert row.principal_notes == "ok"
    assert db.get(GradeModel, 1).status == "draft"


def test_reject_records_reason(db, grades, seed):
    result = reject_grades(db, seed.principal_id, 1, [3], "Recheck marking")

    assert result.data["updated_ids"] == [3]
    assert db.get(GradeModel, 3).status == "rejected"
    assert db.get(GradeModel, 3).principal_notes == "Recheck marking"


def test_release_requires_approved(db, grades, seed):
    result = release_grades(db, seed.principal_id, 1, [3, 4])

    assert result.data["updated_ids"] == [4]
    assert db.get(GradeModel, 4).status == "released"
    assert db.get(GradeModel, 4).released_at is not None


def test_other_school_rows_are_untouched(db, grades, seed):
    result = approve_grades(db, seed.other_principal_id, 2, [3])

    assert result.data["updated_count"] == 0
    assert db.get(GradeModel, 3).status == "pending_approval"


def test_override_recomputes_percentage_and_letter(db, grades, seed):
    result = override_grade(db, seed.principal_id, 1, 2, 75, principal_notes="Remarked")

    assert result.success
    row = db.get(GradeModel, 2)
    assert row.score == 75
    assert row.percentage == 75
    assert row.letter_grade == "B+"
    assert row.status == "approved"
    assert row.principal_notes == "Remarked"


def test_override_rejects_missing_grade_and_excess_score(db, grades, seed):
    assert override_grade(db, seed.principal_id, 1, 999, 50).error == GRADE_NOT_FOUND
    assert override_grade(db, seed.principal_id, 1, 2, 150).error == SCORE_ABOVE_MAX
    assert db.get(GradeModel, 2).score == 55
