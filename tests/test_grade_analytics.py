import random
from collections import Counter

from models.grades import GradeRecord as GradeModel
from schemas.grades import GradeFilters, GradeRecord
from services.analytics_policy import AnalyticsPolicy, round_half_up
from services.grade_analytics import (
    calculate_grades_summary,
    generate_grades_insights,
    performance_trends,
    summarize_grades,
)

SAMPLE_PERCENTAGES = [95, 82, 71, 65, 58, 42, 38, 91, 77, 60, 55, 20]


def _rec(student_id, percentage, subject_id=1, class_id=1, **kw):
    return GradeRecord(
        student_id=student_id,
        subject_id=subject_id,
        class_id=class_id,
        percentage=percentage,
        **kw,
    )


# ==========================================================
# [분포 / 평균]
# ==========================================================
def test_distribution_and_average_for_sample_records():
    records = [_rec(i, p) for i, p in enumerate(SAMPLE_PERCENTAGES, start=1)]

    summary = summarize_grades(records)

    dist = summary.grade_distribution
    assert (dist.excellent, dist.good, dist.satisfactory, dist.needs_improvement, dist.failing) == (3, 2, 2, 3, 2)
    assert summary.overall_average == 63
    assert summary.total_grades == 12


def test_distribution_buckets_always_sum_to_record_count():
    rng = random.Random(7)
    for _ in range(25):
        records = [_rec(rng.randint(1, 6), rng.uniform(0, 100)) for _ in range(rng.randint(0, 40))]
        dist = summarize_grades(records).grade_distribution
        total = dist.excellent + dist.good + dist.satisfactory + dist.needs_improvement + dist.failing
        assert total == len(records)


def test_empty_input_returns_zeroed_summary():
    summary = summarize_grades([])

    assert summary.overall_average == 0
    assert summary.total_grades == 0
    assert summary.subject_performance == []
    assert summary.top_performers == []
    assert summary.grade_distribution.failing == 0


def test_percentage_is_derived_from_score_when_missing():
    record = GradeRecord(student_id=1, subject_id=1, class_id=1, score=45, max_score=50)
    assert record.percentage == 90


def test_overall_average_rounds_half_up():
    summary = summarize_grades([_rec(1, 62), _rec(2, 63)])
    assert summary.overall_average == 63
    assert round_half_up(0.5) == 1
    assert round_half_up(62.4999) == 62


def test_missing_percentage_counts_as_zero():
    summary = summarize_grades([_rec(1, None), _rec(2, 80)])
    assert summary.overall_average == 40
    assert summary.grade_distribution.failing == 1


def test_filters_narrow_records():
    records = [
        _rec(1, 90, class_id=1, term="1"),
        _rec(2, 40, class_id=2, term="1"),
        _rec(3, 50, class_id=2, term="2"),
    ]

    summary = summarize_grades(records, GradeFilters(class_id=2, term="1"))

    assert summary.total_grades == 1
    assert summary.overall_average == 40


# ==========================================================
# [과목 / 학급]
# ==========================================================
def test_subject_trend_compares_recent_third_with_mean():
    rising = [_rec(i, p, subject_id=1, subject_name="Math") for i, p in enumerate([60, 60, 60, 70, 70, 70])]
    falling = [_rec(i, p, subject_id=2, subject_name="English") for i, p in enumerate([80, 80, 80, 70, 70, 70])]
    flat = [_rec(i, 75, subject_id=3) for i in range(4)]

    subjects = {s.subject_id: s for s in summarize_grades(rising + falling + flat).subject_performance}

    assert subjects[1].improvement_trend == "up"
    assert subjects[2].improvement_trend == "down"
    assert subjects[3].improvement_trend == "stable"
    assert subjects[3].subject_name == "Unknown Subject"
    assert subjects[2].average_score == 75
    assert subjects[2].difficulty_index == 0.25


def test_subject_performance_sorted_by_average_desc():
    records = [_rec(1, 50, subject_id=1), _rec(1, 90, subject_id=2), _rec(1, 70, subject_id=3)]
    order = [s.subject_id for s in summarize_grades(records).subject_performance]
    assert order == [2, 3, 1]


def test_class_top_student_keeps_first_on_tie():
    records = [
        _rec(1, 80, student_name="Amina", class_name="Grade 4"),
        _rec(2, 80, student_name="Brian", class_name="Grade 4"),
        _rec(3, 60, student_name="Chloe", class_name="Grade 4"),
    ]

    [cls] = summarize_grades(records).class_performance

    assert cls.top_student == "Amina"
    assert cls.top_student_id == 1
    assert cls.student_count == 3
    assert cls.class_name == "Grade 4"


def test_class_top_student_is_none_when_every_average_is_zero():
    records = [
        _rec(1, 0, student_name="Amina", class_name="Grade 4"),
        _rec(2, 0, student_name="Brian", class_name="Grade 4"),
    ]

    [cls] = summarize_grades(records).class_performance

    assert cls.top_student == "None"
    assert cls.top_student_id is None


def test_class_improvement_rate_is_consistency_score():
    uniform = [_rec(i, 70, class_id=1) for i in range(3)]
    spread = [_rec(i, p, class_id=2) for i, p in enumerate([0, 100])]

    classes = {c.class_id: c for c in summarize_grades(uniform + spread).class_performance}

    assert classes[1].improvement_rate == 10
    # 표준편차 50 → (100 - 50) / 10 = 5
    assert classes[2].improvement_rate == 5


# ==========================================================
# [워크플로 / 추세]
# ==========================================================
def test_workflow_status_counts_unknown_as_draft():
    statuses = ["draft", "pending_approval", "pending_approval", "approved", "rejected", "released", "archived"]
    records = [_rec(i, 70, status=s) for i, s in enumerate(statuses)]

    workflow = summarize_grades(records).workflow_status

    assert workflow.pending_approval == 2
    assert workflow.approved == 1
    assert workflow.rejected == 1
    assert workflow.released == 1
    assert workflow.draft == 2


def test_performance_trends_sorted_with_directions():
    records = [
        _rec(1, 71, term="T2", exam_type="A"),
        _rec(1, 60, term="T1", exam_type="A"),
        _rec(1, 70, term="T1", exam_type="B"),
    ]

    trends = summarize_grades(records).performance_trends

    assert [t.period for t in trends] == ["T1-A", "T1-B", "T2-A"]
    assert [t.trend_direction for t in trends] == ["stable", "up", "stable"]


def test_performance_trends_keep_last_six_periods():
    records = [_rec(1, 50 + i * 5, term=f"T{i}", exam_type="X") for i in range(8)]

    trends = performance_trends(records)

    assert len(trends) == 6
    assert trends[0].period == "T2-X"
    assert all(t.trend_direction == "up" for t in trends)


# ==========================================================
# [상위 / 부진 학생]
# ==========================================================
def test_top_performers_require_three_records():
    records = [_rec(1, 90, student_name="Amina") for _ in range(3)]
    records += [_rec(2, 99, student_name="Brian") for _ in range(2)]

    top = summarize_grades(records).top_performers

    assert [t.student_id for t in top] == [1]
    assert top[0].overall_percentage == 90
    assert top[0].subject_count == 3


def test_underperformers_by_average_or_failing_count():
    records = [_rec(3, p) for p in (50, 55, 80)]          # 평균 62, 낙제 2과목
    records += [_rec(4, 30) for _ in range(2)]            # 성적 2건 → 제외
    records += [_rec(5, 40) for _ in range(3)]            # 평균 40
    records += [_rec(6, p) for p in (90, 85, 55)]         # 평균 77, 낙제 1과목 → 제외

    under = summarize_grades(records).underperformers

    assert [u.student_id for u in under] == [5, 3]
    assert under[0].improvement_potential == 30
    assert under[1].failing_subjects == 2
    assert under[1].improvement_potential == 8


def test_rankings_never_include_students_with_few_records():
    rng = random.Random(42)
    for _ in range(30):
        records = [_rec(rng.randint(1, 8), rng.choice([10, 30, 55, 70, 88, 95])) for _ in range(rng.randint(0, 30))]
        counts = Counter(r.student_id for r in records)
        summary = summarize_grades(records)
        for student in summary.top_performers + summary.underperformers:
            assert counts[student.student_id] >= 3


def test_policy_can_relax_ranking_minimum():
    records = [_rec(1, 95), _rec(1, 95)]
    summary = summarize_grades(records, policy=AnalyticsPolicy(ranking_min_records=2))
    assert [t.student_id for t in summary.top_performers] == [1]


# ==========================================================
# [인사이트]
# ==========================================================
def test_insights_flag_low_average_and_failures():
    records = [_rec(i, p) for i, p in enumerate([20, 30, 35, 90], start=1)]

    insights = generate_grades_insights(summarize_grades(records))

    assert insights.key_metrics["total_grades"] == 4
    assert "Consider implementing academic support programs" in insights.recommendations
    assert insights.alerts == ["High failure rate: 3 failing grades"]


def test_insights_quiet_for_healthy_school():
    records = [_rec(i, 85) for i in range(10)]
    insights = generate_grades_insights(summarize_grades(records))
    assert insights.recommendations == []
    assert insights.alerts == []


# ==========================================================
# [DB] 학교 범위 조회 + 이름 조인
# ==========================================================
def test_calculate_grades_summary_reads_school_rows(db, seed):
    db.add_all([
        GradeModel(school_id=1, student_id=1000, subject_id=100, class_id=10, percentage=p,
                   status="approved", term="1", academic_year="1")
        for p in (90, 88, 86)
    ])
    db.add(GradeModel(school_id=2, student_id=1001, subject_id=100, class_id=20, percentage=10,
                      term="1", academic_year="1"))
    db.commit()

    summary = calculate_grades_summary(db, seed.school_id, GradeFilters(academic_year="1"))

    assert summary.total_grades == 3
    assert summary.overall_average == 88
    assert summary.top_performers[0].student_name == "Amina"
    assert summary.subject_performance[0].subject_name == "Mathematics"
    assert summary.class_performance[0].class_name == "Grade 4 East"
    assert summary.workflow_status.approved == 3
