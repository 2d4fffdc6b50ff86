from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.examinations import ExaminationCreate
from services.academic_integration import create_examination_schedule
from routers.envelope import from_result

router = APIRouter(
    prefix="/examinations",
    tags=["examinations"],
    dependencies=[Depends(require_internal_token)],
)


# ✅ [CREATE] 시험 일정 등록 (교장 전용, 대상 학급 검증 포함)
@router.post("")
def create_examination(
    payload: ExaminationCreate,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    return from_result(create_examination_schedule(db, user_id, payload), "시험 일정 등록 성공")
