"""교사 식별 헤더 의존성

로그인은 범위 밖이라 프런트엔드가 X-Teacher-Id 헤더로 교사 ID를 보낸다.
"""
from fastapi import Depends, Header, HTTPException, status


def get_teacher_id_optional(
    x_teacher_id: str | None = Header(default=None, alias="X-Teacher-Id"),
) -> str | None:
    if not x_teacher_id:
        return None
    teacher_id = x_teacher_id.strip()
    return teacher_id or None


def require_teacher(teacher_id: str | None = Depends(get_teacher_id_optional)) -> str:
    if not teacher_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Teacher-Id 헤더가 필요합니다",
        )
    return teacher_id
