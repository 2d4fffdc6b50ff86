"""
routers/envelope.py

라우터 공통 응답 포맷.
  성공: {"success": True, "data": ..., "message": "..."}
  실패: {"success": False, "error": {"code": <int>, "message": "...", "details": [...]}}

도메인 실패(검증 오류, 권한 거부)는 HTTP 200 + success=False 로 내려준다.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from schemas.enrollments import WorkflowResult
from services.access_scope import Operation, validate_permissions


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def fail(code: int, message: str, details: Optional[list] = None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def from_result(result: WorkflowResult, message: str, code: int = 400) -> dict:
    if not result.success:
        return fail(code, result.error or "Request failed", result.errors)
    data = result.data
    if result.promoted_count is not None:
        data = {**(data or {}), "promoted_count": result.promoted_count}
    return ok(data, message)


def permission_denied(db: Session, user_id: int, school_id: int, operation: Operation) -> Optional[dict]:
    """권한이 없으면 403 실패 응답, 있으면 None"""
    check = validate_permissions(db, user_id, school_id, operation)
    if check.can_perform:
        return None
    return fail(403, check.error)
