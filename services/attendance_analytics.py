"""
services/attendance_analytics.py

출결 행 묶음 → 대시보드 요약 / 경고 / 인사이트.
지각(late)은 출석으로 계산한다.
"""

import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from models.enums import AttendanceStatus
from schemas.attendance import (
    AttendanceAlerts,
    AttendanceInsights,
    AttendanceRecord,
    AttendanceSummary,
    ClassAttendanceSummary,
    WeeklyTrend,
)
from services.academic_repository import AcademicRepository
from services.analytics_policy import DEFAULT_ATTENDANCE_POLICY, AttendancePolicy, round_half_up

logger = logging.getLogger(__name__)

_ATTENDED = {AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value}


def _attended(record: AttendanceRecord) -> bool:
    return record.status in _ATTENDED


def _rate(records: List[AttendanceRecord]) -> int:
    if not records:
        return 0
    return round_half_up(sum(1 for r in records if _attended(r)) / len(records) * 100)


def week_start(day: date) -> date:
    """해당 날짜가 속한 주의 일요일"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def weekly_trends(records: List[AttendanceRecord], policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY) -> List[WeeklyTrend]:
    weeks: "OrderedDict[date, List[AttendanceRecord]]" = OrderedDict()
    for record in records:
        weeks.setdefault(week_start(record.date), []).append(record)

    trends = [
        WeeklyTrend(week_start=start, week_end=start + timedelta(days=6), attendance_rate=_rate(rows))
        for start, rows in sorted(weeks.items())
    ]
    for i in range(1, len(trends)):
        difference = trends[i].attendance_rate - trends[i - 1].attendance_rate
        if difference > policy.trend_threshold:
            trends[i].trend_direction = "up"
        elif difference < -policy.trend_threshold:
            trends[i].trend_direction = "down"

    return trends[-policy.weeks_limit:]


def class_summaries(records: List[AttendanceRecord], policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY) -> List[ClassAttendanceSummary]:
    classes: "OrderedDict[int, List[AttendanceRecord]]" = OrderedDict()
    for record in records:
        classes.setdefault(record.class_id, []).append(record)

    summaries = []
    for class_id, rows in classes.items():
        per_student: "OrderedDict[int, Tuple[int, int]]" = OrderedDict()
        for row in rows:
            total, present = per_student.get(row.student_id, (0, 0))
            per_student[row.student_id] = (total + 1, present + (1 if _attended(row) else 0))

        chronic = perfect = 0
        for total, present in per_student.values():
            rate = present / total if total else 0
            if rate < policy.chronic_absence_rate:
                chronic += 1
            if rate == 1.0:
                perfect += 1

        summaries.append(ClassAttendanceSummary(
            class_id=class_id,
            class_name=rows[0].class_name or "Unknown Class",
            student_count=len(per_student),
            attendance_rate=_rate(rows),
            chronic_absentees=chronic,
            perfect_attendance=perfect,
        ))
    return sorted(summaries, key=lambda s: s.class_name)


def overall_trend(trends: List[WeeklyTrend], policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY) -> str:
    if len(trends) < 2:
        return "stable"
    recent = trends[-policy.direction_window:]
    ups = sum(1 for t in recent if t.trend_direction == "up")
    downs = sum(1 for t in recent if t.trend_direction == "down")
    if ups > downs + 1:
        return "improving"
    if downs > ups + 1:
        return "declining"
    return "stable"


def summarize_attendance(
    records: Iterable,
    date_range: Optional[Tuple[date, date]] = None,
    policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY,
) -> AttendanceSummary:
    rows = [r if isinstance(r, AttendanceRecord) else AttendanceRecord.model_validate(r) for r in records]
    if date_range is not None:
        start, end = date_range
        rows = [r for r in rows if start <= r.date <= end]

    if not rows:
        return AttendanceSummary()

    counts = {status.value: 0 for status in AttendanceStatus}
    for row in rows:
        if row.status in counts:
            counts[row.status] += 1

    trends = weekly_trends(rows, policy)
    return AttendanceSummary(
        overall_attendance_percentage=_rate(rows),
        total_students=len({r.student_id for r in rows}),
        total_school_days=len({r.date for r in rows}),
        present_count=counts[AttendanceStatus.PRESENT.value],
        absent_count=counts[AttendanceStatus.ABSENT.value],
        late_count=counts[AttendanceStatus.LATE.value],
        excused_count=counts[AttendanceStatus.EXCUSED.value],
        trend=overall_trend(trends, policy),
        weekly_trends=trends,
        class_summaries=class_summaries(rows, policy),
    )


def load_attendance_records(
    db: Session,
    school_id: int,
    date_range: Optional[Tuple[date, date]] = None,
    class_id: Optional[int] = None,
) -> List[AttendanceRecord]:
    start, end = date_range if date_range else (None, None)
    records = []
    for row, class_name in AcademicRepository(db).attendance_rows(school_id, start, end, class_id):
        record = AttendanceRecord.model_validate(row)
        record.class_name = class_name
        records.append(record)
    return records


def calculate_attendance_summary(
    db: Session,
    school_id: int,
    date_range: Optional[Tuple[date, date]] = None,
    policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY,
) -> AttendanceSummary:
    records = load_attendance_records(db, school_id, date_range)
    logger.info("출결 요약 계산 school_id=%s rows=%d", school_id, len(records))
    return summarize_attendance(records, policy=policy)


def attendance_alerts(summary: AttendanceSummary, policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY) -> AttendanceAlerts:
    return AttendanceAlerts(
        chronic_absenteeism=sum(c.chronic_absentees for c in summary.class_summaries),
        declining_classes=[
            c.class_name for c in summary.class_summaries if c.attendance_rate < policy.declining_class_rate
        ],
        perfect_attendance_students=sum(c.perfect_attendance for c in summary.class_summaries),
    )


def generate_attendance_insights(summary: AttendanceSummary, policy: AttendancePolicy = DEFAULT_ATTENDANCE_POLICY) -> AttendanceInsights:
    alerts = attendance_alerts(summary, policy)

    recommendations: List[str] = []
    if summary.overall_attendance_percentage < policy.overall_rate_target:
        recommendations.append("Consider implementing attendance improvement initiatives")
    if alerts.chronic_absenteeism > summary.total_students * policy.chronic_ratio_alert:
        recommendations.append("Review chronic absenteeism intervention strategies")
    if alerts.declining_classes:
        recommendations.append(f"Focus on improving attendance in: {', '.join(alerts.declining_classes)}")

    trends = [f"Overall attendance trend: {summary.trend}"]
    if summary.weekly_trends:
        trends.append(f"Current weekly rate: {summary.weekly_trends[-1].attendance_rate}%")

    return AttendanceInsights(
        key_metrics={
            "overall_rate": summary.overall_attendance_percentage,
            "total_students": summary.total_students,
            "chronic_absentees": alerts.chronic_absenteeism,
            "perfect_attendance": alerts.perfect_attendance_students,
        },
        recommendations=recommendations,
        trends=trends,
    )
