from typing import Optional, Annotated
from fastapi import Header, HTTPException
from config.settings import settings
import hmac

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]
UserIdHeader = Annotated[Optional[str], Header(alias="X-User-Id")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(authorization: Optional[str]) -> str:
    """'Bearer <token>' 헤더에서 토큰만 꺼낸다 (형식 오류는 401)"""
    if not authorization:
        raise _unauthorized("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if not token.strip():
        raise _unauthorized("Invalid Authorization header format")
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme")
    return token.strip()


def require_internal_token(authorization: AuthHeader = None):
    # 설정 누락 방지: 환경에서 토큰이 비어있으면 개발 중 오류를 명확히 드러냄
    if not settings.INTERNAL_API_TOKEN:
        raise HTTPException(status_code=500, detail="Server token not configured")

    # 타이밍 안전 비교
    if not hmac.compare_digest(_bearer_token(authorization), settings.INTERNAL_API_TOKEN):
        raise _unauthorized("Invalid token")

    return {"client": "internal"}


def get_acting_user_id(x_user_id: UserIdHeader = None) -> int:
    """게이트웨이가 전달한 요청 사용자 ID (프로필 ID)"""
    if not x_user_id:
        raise _unauthorized("Missing X-User-Id header")
    try:
        return int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Id header")
