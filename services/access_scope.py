"""
services/access_scope.py

역할별 작업 범위 검사.

1) 모든 역할: 사용자 프로필의 school_id == 컨텍스트 school_id
2) 작업 게이트: 작업 종류별로 허용된 역할만 통과 (컨텍스트와 무관)
3) 컨텍스트 규칙: 교사는 본인 배정(학급/과목/학년도/학기) 안에서만,
   교장/학교 소유자는 본인 학교 학급에서만

실패는 항상 작업 거부(is_valid=False + error)이며 부분 허용은 없다.
"""

import logging
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from sqlalchemy.orm import Session

from models.enums import Role
from schemas.context import AcademicContext, PermissionCheck, ScopeCheck
from services.academic_context import get_current_period
from services.academic_repository import AcademicRepository

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    CREATE_EXAMINATION = "create_examination"
    RECORD_ATTENDANCE = "record_attendance"
    ENTER_GRADES = "enter_grades"
    APPROVE_GRADES = "approve_grades"
    GENERATE_REPORTS = "generate_reports"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_ACADEMIC_STRUCTURE = "manage_academic_structure"   # 배정/진급/현재 기간 변경


PROFILE_NOT_FOUND = "User profile not found"
SCHOOL_ACCESS_DENIED = "Access denied to this school"
UNKNOWN_OPERATION = "Unknown operation"
UNKNOWN_ROLE = "Unknown user role"
NOT_ASSIGNED = "You are not assigned to this class/subject for the current academic period"
CLASS_NOT_IN_SCHOOL = "Invalid class or class does not belong to your school"

# ==========================================================
# [작업 게이트] 작업 → 허용 역할
# ==========================================================
_ALL_ROLES: FrozenSet[Role] = frozenset(Role)

OPERATION_ROLES: Dict[Operation, FrozenSet[Role]] = {
    Operation.CREATE_EXAMINATION: frozenset({Role.PRINCIPAL}),
    Operation.RECORD_ATTENDANCE: frozenset({Role.TEACHER, Role.PRINCIPAL}),
    Operation.ENTER_GRADES: frozenset({Role.TEACHER, Role.PRINCIPAL}),
    Operation.APPROVE_GRADES: frozenset({Role.PRINCIPAL}),
    Operation.GENERATE_REPORTS: frozenset({Role.PRINCIPAL, Role.SCHOOL_OWNER, Role.EDUFAM_ADMIN}),
    Operation.VIEW_ANALYTICS: _ALL_ROLES,
    Operation.MANAGE_ACADEMIC_STRUCTURE: frozenset({Role.PRINCIPAL, Role.SCHOOL_OWNER}),
}

OPERATION_DENIED_MESSAGES: Dict[Operation, str] = {
    Operation.CREATE_EXAMINATION: "Only principals can create examinations",
    Operation.RECORD_ATTENDANCE: "Only teachers and principals can record attendance",
    Operation.ENTER_GRADES: "Only teachers and principals can enter grades",
    Operation.APPROVE_GRADES: "Only principals can approve grades",
    Operation.GENERATE_REPORTS: "Insufficient permissions to generate reports",
    Operation.VIEW_ANALYTICS: "Insufficient permissions to view analytics",
    Operation.MANAGE_ACADEMIC_STRUCTURE: "Only principals and school owners can manage academic structure",
}


def parse_operation(name) -> Optional[Operation]:
    try:
        return Operation(name)
    except ValueError:
        return None


def parse_role(name) -> Optional[Role]:
    try:
        return Role(name)
    except ValueError:
        return None


def check_operation_permission(role: Role, operation: Operation) -> Optional[str]:
    """허용되면 None, 아니면 거부 메시지"""
    if role in OPERATION_ROLES[operation]:
        return None
    return OPERATION_DENIED_MESSAGES[operation]


# ==========================================================
# [컨텍스트 규칙] 역할 → 검사 함수 (None = 통과, 문자열 = 거부 사유)
# ==========================================================
def _teacher_rule(repo: AcademicRepository, user_id: int, context: AcademicContext) -> Optional[str]:
    if context.class_id is None or context.subject_id is None:
        return None

    # 학년도/학기가 비어 있으면 현재 기간 기준으로 배정을 확인
    year_id, term_id = context.academic_year_id, context.term_id
    if year_id is None or term_id is None:
        period = get_current_period(repo.db, context.school_id)
        if period is None:
            return NOT_ASSIGNED
        year_id = year_id if year_id is not None else period.academic_year_id
        term_id = term_id if term_id is not None else period.term_id

    assignment = repo.find_teacher_assignment(
        teacher_id=user_id,
        class_id=context.class_id,
        subject_id=context.subject_id,
        academic_year_id=year_id,
        term_id=term_id,
    )
    return None if assignment is not None else NOT_ASSIGNED


def _school_class_rule(repo: AcademicRepository, user_id: int, context: AcademicContext) -> Optional[str]:
    # 교장/학교 소유자는 본인 학교의 모든 학급에서 작업 가능
    if context.class_id is None:
        return None
    if repo.get_class(context.class_id, context.school_id) is None:
        return CLASS_NOT_IN_SCHOOL
    return None


def _no_context_rule(repo: AcademicRepository, user_id: int, context: AcademicContext) -> Optional[str]:
    return None


ContextRule = Callable[[AcademicRepository, int, AcademicContext], Optional[str]]

CONTEXT_RULES: Dict[Role, ContextRule] = {
    Role.TEACHER: _teacher_rule,
    Role.PRINCIPAL: _school_class_rule,
    Role.SCHOOL_OWNER: _school_class_rule,
    Role.FINANCE_OFFICER: _no_context_rule,
    Role.EDUFAM_ADMIN: _no_context_rule,
}

# 역할이 추가되면 규칙 표 두 곳을 모두 검토해야 한다
_missing = set(Role) - set(CONTEXT_RULES)
if _missing:
    raise RuntimeError(f"CONTEXT_RULES 에 규칙이 없는 역할: {sorted(r.value for r in _missing)}")
_missing_ops = set(Operation) - set(OPERATION_ROLES)
if _missing_ops:
    raise RuntimeError(f"OPERATION_ROLES 에 없는 작업: {sorted(o.value for o in _missing_ops)}")


# ==========================================================
# [공개 함수]
# ==========================================================
def validate_scope(db: Session, user_id: int, context: AcademicContext, operation) -> ScopeCheck:
    repo = AcademicRepository(db)

    profile = repo.get_profile(user_id)
    if profile is None:
        return ScopeCheck(is_valid=False, error=PROFILE_NOT_FOUND)

    if profile.school_id != context.school_id:
        logger.warning("학교 접근 거부 user_id=%s school_id=%s", user_id, context.school_id)
        return ScopeCheck(is_valid=False, error=SCHOOL_ACCESS_DENIED, role=profile.role)

    role = parse_role(profile.role)
    if role is None:
        return ScopeCheck(is_valid=False, error=UNKNOWN_ROLE, role=profile.role)

    op = parse_operation(operation)
    if op is None:
        return ScopeCheck(is_valid=False, error=UNKNOWN_OPERATION, role=role.value)

    denied = check_operation_permission(role, op)
    if denied:
        return ScopeCheck(is_valid=False, error=denied, role=role.value)

    denied = CONTEXT_RULES[role](repo, user_id, context)
    if denied:
        logger.info("작업 범위 거부 user_id=%s op=%s reason=%s", user_id, op.value, denied)
        return ScopeCheck(is_valid=False, error=denied, role=role.value)

    return ScopeCheck(is_valid=True, role=role.value)


def validate_permissions(db: Session, user_id: int, school_id: int, operation) -> PermissionCheck:
    """컨텍스트 없이 역할/학교/작업 게이트만 확인 (메뉴 노출 여부 판단 등)"""
    repo = AcademicRepository(db)

    profile = repo.get_profile(user_id)
    if profile is None:
        return PermissionCheck(can_perform=False, error=PROFILE_NOT_FOUND)
    if profile.school_id != school_id:
        return PermissionCheck(can_perform=False, error=SCHOOL_ACCESS_DENIED)

    role = parse_role(profile.role)
    if role is None:
        return PermissionCheck(can_perform=False, error=UNKNOWN_ROLE)
    op = parse_operation(operation)
    if op is None:
        return PermissionCheck(can_perform=False, error=UNKNOWN_OPERATION)

    denied = check_operation_permission(role, op)
    return PermissionCheck(can_perform=denied is None, error=denied)
