"""
services/analytics_policy.py

대시보드 분석에 쓰는 고정 정책 값.
추세/개선율은 통계적 추세 검출이 아니라 임계값 기반 휴리스틱이다. 값을 바꾸면 대시보드 수치가 달라진다.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class AnalyticsPolicy:
    # 성적 분포 구간 (percentage 하한)
    excellent_min: float = 80
    good_min: float = 70
    satisfactory_min: float = 60
    needs_improvement_min: float = 40

    # 추세 판정 (점수 차이 임계값)
    subject_trend_threshold: float = 2          # 과목: 최근 1/3 평균 vs 전체 평균
    period_trend_threshold: float = 3           # 기간: 직전 기간 평균 대비
    trend_periods_limit: int = 6                # 최근 기간 수

    # 학생 순위
    ranking_min_records: int = 3                # 순위 포함 최소 성적 건수
    top_performer_min: float = 85
    top_performers_limit: int = 10
    underperformer_max: float = 60              # 평균 미만이면 부진
    failing_record_max: float = 60              # 이 값 미만 성적 = 낙제 과목
    underperformer_failing_records: int = 2
    improvement_target: float = 70
    underperformers_limit: int = 15

    # 인사이트 문구 기준
    insight_average_min: float = 70
    insight_underperformer_ratio: float = 0.2
    insight_pending_max: int = 50
    insight_failing_ratio: float = 0.15
    insight_rejected_max: int = 10


DEFAULT_POLICY = AnalyticsPolicy()


@dataclass(frozen=True)
class AttendancePolicy:
    trend_threshold: float = 2                  # 주간 출석률 변화 임계값
    weeks_limit: int = 8
    direction_window: int = 4                   # 전체 추세 판단에 쓰는 최근 주 수
    chronic_absence_rate: float = 0.8           # 이 비율 미만이면 만성 결석
    declining_class_rate: float = 75
    overall_rate_target: float = 85
    chronic_ratio_alert: float = 0.1


DEFAULT_ATTENDANCE_POLICY = AttendancePolicy()


def round_half_up(value: float) -> int:
    """0.5 는 항상 올림 (대시보드 표시 규칙, 파이썬 기본 round 의 은행가 반올림과 다름)"""
    return int(math.floor(value + 0.5))


def policy_from_settings(settings) -> AnalyticsPolicy:
    return AnalyticsPolicy(
        excellent_min=settings.GRADE_EXCELLENT_MIN,
        good_min=settings.GRADE_GOOD_MIN,
        satisfactory_min=settings.GRADE_SATISFACTORY_MIN,
        needs_improvement_min=settings.GRADE_NEEDS_IMPROVEMENT_MIN,
        ranking_min_records=settings.RANKING_MIN_RECORDS,
        top_performer_min=settings.TOP_PERFORMER_MIN,
        top_performers_limit=settings.TOP_PERFORMERS_LIMIT,
        underperformers_limit=settings.UNDERPERFORMERS_LIMIT,
    )
