from datetime import date, timedelta

from models.attendance import AttendanceRecord as AttendanceModel
from schemas.attendance import AttendanceRecord
from services.attendance_analytics import (
    attendance_alerts,
    calculate_attendance_summary,
    generate_attendance_insights,
    summarize_attendance,
    week_start,
)


def _rec(student_id, day, status, class_id=1, class_name="Grade 4"):
    return AttendanceRecord(student_id=student_id, class_id=class_id, date=day, status=status, class_name=class_name)


def test_week_starts_on_sunday():
    assert week_start(date(2025, 3, 5)) == date(2025, 3, 2)   # 수요일
    assert week_start(date(2025, 3, 2)) == date(2025, 3, 2)   # 일요일
    assert week_start(date(2025, 3, 8)) == date(2025, 3, 2)   # 토요일


def test_late_counts_as_present():
    day = date(2025, 3, 3)
    records = [_rec(1, day, "present"), _rec(2, day, "late"), _rec(3, day, "absent"), _rec(4, day, "excused")]

    summary = summarize_attendance(records)

    assert summary.overall_attendance_percentage == 50
    assert (summary.present_count, summary.late_count, summary.absent_count, summary.excused_count) == (1, 1, 1, 1)
    assert summary.total_students == 4
    assert summary.total_school_days == 1


def test_empty_attendance_summary():
    summary = summarize_attendance([])
    assert summary.overall_attendance_percentage == 0
    assert summary.trend == "stable"
    assert summary.weekly_trends == []


def test_weekly_trends_and_overall_direction():
    start = date(2025, 3, 3)
    records = []
    # 주별 출석 인원 2 → 3 → 4 (5명 중)
    for week, present in enumerate([2, 3, 4]):
        day = start + timedelta(weeks=week)
        for sid in range(5):
            records.append(_rec(sid, day, "present" if sid < present else "absent"))

    summary = summarize_attendance(records)

    assert [w.attendance_rate for w in summary.weekly_trends] == [40, 60, 80]
    assert [w.trend_direction for w in summary.weekly_trends] == ["stable", "up", "up"]
    assert summary.weekly_trends[0].week_end == date(2025, 3, 8)
    assert summary.trend == "improving"


def test_weekly_trends_keep_last_eight_weeks():
    records = [_rec(1, date(2025, 1, 6) + timedelta(weeks=w), "present") for w in range(10)]
    assert len(summarize_attendance(records).weekly_trends) == 8


def test_class_summaries_sorted_by_name_with_chronic_and_perfect():
    days = [date(2025, 3, 3) + timedelta(days=d) for d in range(5)]
    records = [_rec(1, d, "present", class_id=2, class_name="B Class") for d in days]
    records += [_rec(2, d, "absent" if i < 2 else "present", class_id=2, class_name="B Class") for i, d in enumerate(days)]
    records += [_rec(3, d, "present", class_id=1, class_name="A Class") for d in days]

    summary = summarize_attendance(records)
    classes = summary.class_summaries

    assert [c.class_name for c in classes] == ["A Class", "B Class"]
    assert classes[1].student_count == 2
    assert classes[1].chronic_absentees == 1
    assert classes[1].perfect_attendance == 1
    assert classes[1].attendance_rate == 80


def test_date_range_filter():
    records = [_rec(1, date(2025, 3, 3), "present"), _rec(1, date(2025, 4, 3), "absent")]
    summary = summarize_attendance(records, (date(2025, 3, 1), date(2025, 3, 31)))
    assert summary.overall_attendance_percentage == 100


def test_alerts_and_insights():
    day = date(2025, 3, 3)
    records = [_rec(sid, day, "absent" if sid < 3 else "present", class_name="Grade 7") for sid in range(5)]

    summary = summarize_attendance(records)
    alerts = attendance_alerts(summary)
    insights = generate_attendance_insights(summary)

    assert alerts.declining_classes == ["Grade 7"]
    assert alerts.chronic_absenteeism == 3
    assert insights.key_metrics["overall_rate"] == 40
    assert insights.recommendations == [
        "Consider implementing attendance improvement initiatives",
        "Review chronic absenteeism intervention strategies",
        "Focus on improving attendance in: Grade 7",
    ]
    assert insights.trends == ["Overall attendance trend: stable", "Current weekly rate: 40%"]


def test_calculate_attendance_summary_from_db(db, seed):
    db.add_all([
        AttendanceModel(school_id=1, class_id=10, student_id=1000, date=date(2025, 3, 3), status="present"),
        AttendanceModel(school_id=1, class_id=10, student_id=1001, date=date(2025, 3, 3), status="late"),
        AttendanceModel(school_id=2, class_id=20, student_id=1002, date=date(2025, 3, 3), status="absent"),
    ])
    db.commit()

    summary = calculate_attendance_summary(db, seed.school_id)

    assert summary.overall_attendance_percentage == 100
    assert summary.class_summaries[0].class_name == "Grade 4 East"
