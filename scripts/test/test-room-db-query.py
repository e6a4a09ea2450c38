#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""방 데이터 DB 직접 쿼리 스크립트"""
import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# 환경변수 로드
from dotenv import load_dotenv
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

from sqlalchemy import text
from app.crud import room as room_crud
from app.models.base import get_engine, get_session_factory


async def test_room_db_query(room_code: str):
    print(f"\n{'='*60}")
    print(f"DB 직접 쿼리: room_code={room_code}")
    print(f"{'='*60}\n")

    try:
        engine = get_engine()
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            print(f"[OK] DB 연결 성공: {result.scalar()}")

        async with get_session_factory()() as session:
            room = await room_crud.get_room_by_code(session, room_code)
            if not room:
                print(f"[WARN] 방을 찾을 수 없습니다: room_code={room_code}")
                return

            print(f"[OK] 방 조회:")
            print(f"  - id: {room.id}")
            print(f"  - mode: {room.question_mode}")
            print(f"  - is_active: {room.is_active}")
            print(f"  - current_question_index: {room.current_question_index}")
            print(f"  - show_results: {room.show_results}")

            result = await session.execute(
                text("""
                    SELECT p.student_name, COUNT(a.id), COALESCE(SUM(CASE WHEN a.is_correct THEN 1 ELSE 0 END), 0)
                    FROM participants p
                    LEFT JOIN answers a ON a.participant_id = p.id
                    WHERE p.room_id = :room_id
                    GROUP BY p.id, p.student_name
                    ORDER BY p.joined_at
                """),
                {"room_id": room.id},
            )
            print(f"\n[참가자별 답안 수 / 정답 수]")
            for name, answered, correct in result.fetchall():
                print(f"  - {name}: {correct}/{answered}")

    except Exception as e:
        print(f"\n[ERROR] 에러 발생: {e.__class__.__name__}: {str(e)}")
        import traceback
        traceback.print_exc()
        print(f"\n[INFO] 가능한 원인:")
        print(f"  1. DB 연결 정보가 잘못되었습니다 (.env 파일 확인)")
        print(f"  2. DB 서버가 실행 중이지 않습니다")
        print(f"  3. 마이그레이션이 적용되지 않았습니다 (alembic upgrade head)")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="방 데이터 DB 직접 쿼리")
    parser.add_argument("room_code", type=str, help="참여 코드 (6자리)")

    args = parser.parse_args()

    asyncio.run(test_room_db_query(args.room_code))
