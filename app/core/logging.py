# -*- coding: utf-8 -*-
import logging
import sys
from pathlib import Path

from app.core.config import settings

_HANDLER_NAME = "classroom-quiz"


def setup_logging():
    """로깅 설정 (여러 번 호출해도 핸들러는 한 번만 등록)"""
    log_level = logging.DEBUG if settings.environment == "development" else logging.INFO

    # 로그 포맷
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    # 콘솔 핸들러
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # 파일 핸들러 (프로덕션)
    if settings.environment == "production":
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_dir / "room_sessions.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        root_logger.addHandler(file_handler)

    # 실시간 피드는 구독자마다 로그가 쌓이므로 DEBUG 제외
    logging.getLogger("app.services.change_feed").setLevel(max(log_level, logging.INFO))
