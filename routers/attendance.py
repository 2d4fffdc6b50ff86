from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.attendance import AttendanceRecordRequest
from services.academic_integration import record_attendance
from routers.envelope import from_result

router = APIRouter(
    prefix="/attendance",
    tags=["attendance"],
    dependencies=[Depends(require_internal_token)],
)


# ✅ [CREATE/UPDATE] 학급 출결 일괄 기록 (같은 학생/날짜/세션은 덮어쓰기)
@router.post("/records")
def create_attendance_records(
    payload: AttendanceRecordRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    return from_result(record_attendance(db, user_id, payload), "출결 저장 성공")
