#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""로컬 개발용 .env 파일 생성"""
import os
from pathlib import Path

# 프로젝트 루트
project_root = Path(__file__).parent.parent.parent
env_file = project_root / ".env"

# 주의: DB 계정 정보는 직접 입력해야 함
env_content = """# Database
DATABASE_URL=postgresql+asyncpg://<DB_USER>:<DB_PASSWORD>@localhost:5432/classroom_quiz_db

# CORS (쉼표로 구분)
ALLOWED_ORIGINS=http://localhost:5173

# Environment
# development면 상세 에러 메시지 확인 가능
ENVIRONMENT=development
LOG_DIR=./logs

# 방 진행
ROOM_CODE_MAX_ATTEMPTS=5
LIVE_QUEUE_SIZE=256
AUTO_ADVANCE_DELAY_SECONDS=1.5

# 클라이언트
API_BASE_URL=http://localhost:8001
REQUEST_TIMEOUT_SECONDS=10
"""

def create_env_file():
    """.env 파일 생성 (UTF-8, BOM 없음)"""
    print(f"[INFO] .env 파일 생성 중: {env_file}")

    # 기존 파일이 있으면 백업
    if env_file.exists():
        backup_file = project_root / ".env.backup"
        print(f"[INFO] 기존 .env 파일 백업: {backup_file}")
        backup_file.write_text(env_file.read_text(encoding='utf-8'), encoding='utf-8', newline='\n')

    with open(env_file, 'w', encoding='utf-8', newline='\n') as f:
        f.write(env_content)

    print(f"[OK] .env 파일 생성 완료: {env_file}")

    if os.name != 'nt':
        os.chmod(env_file, 0o600)
        print(f"[INFO] 파일 권한 설정: 600")


if __name__ == "__main__":
    try:
        create_env_file()
        print("\n[OK] 작업 완료")
    except Exception as e:
        print(f"\n[ERROR] 에러 발생: {e.__class__.__name__}: {str(e)}")
        import traceback
        traceback.print_exc()
        exit(1)
