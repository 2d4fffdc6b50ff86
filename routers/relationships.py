from typing import Annotated

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_internal_token
from schemas.relationships import RelationshipVariant
from services.relationship_validator import validate_relationships
from routers.envelope import ok

router = APIRouter(
    prefix="/relationships",
    tags=["관계 검증"],
    dependencies=[Depends(require_internal_token)],
)


# ✅ 쓰기 전 참조 무결성 사전 점검 (operation 필드로 요청 종류 구분)
@router.post("/validate")
def validate_relationship_request(
    payload: Annotated[RelationshipVariant, Body(discriminator="operation")],
    db: Session = Depends(get_db),
):
    check = validate_relationships(db, payload)
    return ok(check.model_dump(), "관계 검증 완료")
