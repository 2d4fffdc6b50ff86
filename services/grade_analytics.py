"""
services/grade_analytics.py

성적 행 묶음 → 대시보드 요약(GradesSummary).

- summarize_grades(): 이미 가져온(또는 호출 측이 넘긴) 성적 목록으로 계산하는 순수 함수
- calculate_grades_summary(): 학교 범위로 DB 에서 조회한 뒤 summarize_grades() 에 위임
- 빈 입력이면 0 / 빈 리스트로 채운 요약을 돌려주고 예외를 던지지 않는다.
"""

import logging
import math
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from models.enums import GradeStatus
from schemas.grades import (
    ClassPerformance,
    GradeDistribution,
    GradeFilters,
    GradeRecord,
    GradesInsights,
    GradesSummary,
    PerformanceTrend,
    SubjectPerformance,
    TopPerformer,
    UnderPerformer,
    WorkflowStatus,
)
from services.academic_repository import AcademicRepository
from services.analytics_policy import DEFAULT_POLICY, AnalyticsPolicy, round_half_up

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = "Unknown Student"
UNKNOWN_SUBJECT = "Unknown Subject"
UNKNOWN_CLASS = "Unknown Class"


def _pct(record: GradeRecord) -> float:
    return record.percentage or 0


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


def _group_by(records: List[GradeRecord], key) -> "OrderedDict[object, List[GradeRecord]]":
    groups: "OrderedDict[object, List[GradeRecord]]" = OrderedDict()
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def _trend(difference: float, threshold: float) -> str:
    if difference > threshold:
        return "up"
    if difference < -threshold:
        return "down"
    return "stable"


def apply_filters(records: Iterable[GradeRecord], filters: Optional[GradeFilters]) -> List[GradeRecord]:
    records = list(records)
    if filters is None:
        return records
    if filters.academic_year is not None:
        records = [r for r in records if r.academic_year == filters.academic_year]
    if filters.term is not None:
        records = [r for r in records if r.term == filters.term]
    if filters.class_id is not None:
        records = [r for r in records if r.class_id == filters.class_id]
    return records


# ==========================================================
# [1] 성적 분포
# ==========================================================
def grade_distribution(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> GradeDistribution:
    dist = GradeDistribution()
    for record in records:
        p = _pct(record)
        if p >= policy.excellent_min:
            dist.excellent += 1
        elif p >= policy.good_min:
            dist.good += 1
        elif p >= policy.satisfactory_min:
            dist.satisfactory += 1
        elif p >= policy.needs_improvement_min:
            dist.needs_improvement += 1
        else:
            dist.failing += 1
    return dist


# ==========================================================
# [2] 과목별 성과
# ==========================================================
def subject_trend(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> str:
    """입력 순서 기준 마지막 1/3(올림) 평균을 과목 전체 평균과 비교"""
    scores = [_pct(r) for r in records]
    if not scores:
        return "stable"
    average = _mean(scores)
    recent = scores[-math.ceil(len(scores) / 3):]
    return _trend(_mean(recent) - average, policy.subject_trend_threshold)


def subject_performance(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> List[SubjectPerformance]:
    result = []
    for subject_id, grades in _group_by(records, lambda r: r.subject_id).items():
        average = round_half_up(_mean([_pct(g) for g in grades]))
        result.append(SubjectPerformance(
            subject_id=subject_id,
            subject_name=grades[0].subject_name or UNKNOWN_SUBJECT,
            average_score=average,
            grade_count=len(grades),
            improvement_trend=subject_trend(grades, policy),
            difficulty_index=max(0, 100 - average) / 100,
        ))
    return sorted(result, key=lambda s: s.average_score, reverse=True)


# ==========================================================
# [3] 학급별 성과
# ==========================================================
def class_improvement_rate(records: List[GradeRecord]) -> int:
    """점수 분산이 작을수록 높은 값 (추세가 아니라 일관성 지표)"""
    scores = [_pct(r) for r in records]
    if not scores:
        return 0
    average = _mean(scores)
    variance = sum((s - average) ** 2 for s in scores) / len(scores)
    return max(0, round_half_up((100 - math.sqrt(variance)) / 10))


def class_performance(records: List[GradeRecord]) -> List[ClassPerformance]:
    result = []
    for class_id, grades in _group_by(records, lambda r: r.class_id).items():
        per_student = _student_stats(grades)

        # 평균이 0 보다 큰 학생이 없으면 "None"
        top_id, top_name, best = None, "None", 0.0
        for student_id, stats in per_student.items():
            average = stats["total"] / stats["count"]
            # 동점이면 먼저 나온 학생 유지
            if average > best:
                best, top_id, top_name = average, student_id, stats["name"]

        result.append(ClassPerformance(
            class_id=class_id,
            class_name=grades[0].class_name or UNKNOWN_CLASS,
            student_count=len(per_student),
            average_percentage=round_half_up(_mean([_pct(g) for g in grades])),
            top_student=top_name,
            top_student_id=top_id,
            improvement_rate=class_improvement_rate(grades),
        ))
    return sorted(result, key=lambda c: c.average_percentage, reverse=True)


# ==========================================================
# [4] 승인 워크플로 현황
# ==========================================================
_COUNTED_STATUSES = {
    GradeStatus.PENDING_APPROVAL.value,
    GradeStatus.APPROVED.value,
    GradeStatus.REJECTED.value,
    GradeStatus.RELEASED.value,
}


def workflow_status(records: List[GradeRecord]) -> WorkflowStatus:
    counts = WorkflowStatus()
    for record in records:
        status = record.status if record.status in _COUNTED_STATUSES else GradeStatus.DRAFT.value
        setattr(counts, status, getattr(counts, status) + 1)
    return counts


# ==========================================================
# [5] 기간별 추세
# ==========================================================
def period_key(record: GradeRecord) -> str:
    term = record.term if record.term is not None else "N/A"
    exam_type = record.exam_type if record.exam_type is not None else "N/A"
    return f"{term}-{exam_type}"


def performance_trends(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> List[PerformanceTrend]:
    trends = [
        PerformanceTrend(period=period, average_score=round_half_up(_mean([_pct(g) for g in grades])))
        for period, grades in _group_by(records, period_key).items()
    ]
    trends.sort(key=lambda t: t.period)

    for i in range(1, len(trends)):
        difference = trends[i].average_score - trends[i - 1].average_score
        trends[i].trend_direction = _trend(difference, policy.period_trend_threshold)

    return trends[-policy.trend_periods_limit:]


# ==========================================================
# [6] 상위/부진 학생
# ==========================================================
def _student_stats(records: List[GradeRecord], failing_max: Optional[float] = None) -> Dict[int, dict]:
    stats: Dict[int, dict] = OrderedDict()
    for record in records:
        entry = stats.setdefault(record.student_id, {
            "total": 0.0,
            "count": 0,
            "failing": 0,
            "name": record.student_name or UNKNOWN_STUDENT,
        })
        entry["total"] += _pct(record)
        entry["count"] += 1
        if failing_max is not None and _pct(record) < failing_max:
            entry["failing"] += 1
    return stats


def top_performers(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> List[TopPerformer]:
    performers = []
    for student_id, stats in _student_stats(records).items():
        overall = round_half_up(stats["total"] / stats["count"])
        if overall >= policy.top_performer_min and stats["count"] >= policy.ranking_min_records:
            performers.append(TopPerformer(
                student_id=student_id,
                student_name=stats["name"],
                overall_percentage=overall,
                subject_count=stats["count"],
            ))
    performers.sort(key=lambda p: p.overall_percentage, reverse=True)
    return performers[:policy.top_performers_limit]


def underperformers(records: List[GradeRecord], policy: AnalyticsPolicy = DEFAULT_POLICY) -> List[UnderPerformer]:
    students = []
    for student_id, stats in _student_stats(records, failing_max=policy.failing_record_max).items():
        overall = round_half_up(stats["total"] / stats["count"])
        struggling = overall < policy.underperformer_max or stats["failing"] >= policy.underperformer_failing_records
        if struggling and stats["count"] >= policy.ranking_min_records:
            students.append(UnderPerformer(
                student_id=student_id,
                student_name=stats["name"],
                overall_percentage=overall,
                failing_subjects=stats["failing"],
                improvement_potential=max(0, round_half_up(policy.improvement_target - overall)),
            ))
    students.sort(key=lambda s: s.improvement_potential, reverse=True)
    return students[:policy.underperformers_limit]


# ==========================================================
# [요약] 전체 파이프라인
# ==========================================================
def summarize_grades(
    records: Iterable,
    filters: Optional[GradeFilters] = None,
    policy: AnalyticsPolicy = DEFAULT_POLICY,
) -> GradesSummary:
    rows = [r if isinstance(r, GradeRecord) else GradeRecord.model_validate(r) for r in records]
    rows = apply_filters(rows, filters)

    if not rows:
        return GradesSummary()

    return GradesSummary(
        overall_average=round_half_up(_mean([_pct(r) for r in rows])),
        total_grades=len(rows),
        grade_distribution=grade_distribution(rows, policy),
        subject_performance=subject_performance(rows, policy),
        class_performance=class_performance(rows),
        workflow_status=workflow_status(rows),
        performance_trends=performance_trends(rows, policy),
        top_performers=top_performers(rows, policy),
        underperformers=underperformers(rows, policy),
    )


def load_grade_records(
    db: Session,
    school_id: int,
    filters: Optional[GradeFilters] = None,
    subject_id: Optional[int] = None,
) -> List[GradeRecord]:
    filters = filters or GradeFilters()
    rows = AcademicRepository(db).grade_rows(
        school_id,
        academic_year=filters.academic_year,
        term=filters.term,
        class_id=filters.class_id,
        subject_id=subject_id,
    )
    records = []
    for grade, student_name, subject_name, class_name in rows:
        record = GradeRecord.model_validate(grade)
        record.student_name = student_name
        record.subject_name = subject_name
        record.class_name = class_name
        records.append(record)
    return records


def calculate_grades_summary(
    db: Session,
    school_id: int,
    filters: Optional[GradeFilters] = None,
    policy: AnalyticsPolicy = DEFAULT_POLICY,
) -> GradesSummary:
    records = load_grade_records(db, school_id, filters)
    logger.info("성적 요약 계산 school_id=%s rows=%d", school_id, len(records))
    return summarize_grades(records, policy=policy)


# ==========================================================
# [인사이트] 대시보드 권고/경고 문구
# ==========================================================
def generate_grades_insights(summary: GradesSummary, policy: AnalyticsPolicy = DEFAULT_POLICY) -> GradesInsights:
    key_metrics = {
        "overall_average": summary.overall_average,
        "total_grades": summary.total_grades,
        "pending_approval": summary.workflow_status.pending_approval,
        "top_performers": len(summary.top_performers),
        "underperformers": len(summary.underperformers),
    }

    recommendations: List[str] = []
    alerts: List[str] = []

    if summary.overall_average < policy.insight_average_min:
        recommendations.append("Consider implementing academic support programs")
    if len(summary.underperformers) > summary.total_grades * policy.insight_underperformer_ratio:
        recommendations.append("High number of underperformers requires immediate intervention")
    if summary.workflow_status.pending_approval > policy.insight_pending_max:
        recommendations.append("Large number of grades pending approval - review workflow efficiency")

    if summary.grade_distribution.failing > summary.total_grades * policy.insight_failing_ratio:
        alerts.append(f"High failure rate: {summary.grade_distribution.failing} failing grades")
    if summary.workflow_status.rejected > policy.insight_rejected_max:
        alerts.append(f"{summary.workflow_status.rejected} grades have been rejected")

    return GradesInsights(key_metrics=key_metrics, recommendations=recommendations, alerts=alerts)
