"""헬스 체크 API 라우터"""

import platform
import threading
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from daxdata.config import APP_VERSION, settings
from daxdata.database import check_connection

router = APIRouter()

# 프로세스 시작 시각 (uptime 계산용)
_STARTED_AT = time.monotonic()


@router.get("/health")
def health_check() -> dict:
    """헬스 체크 엔드포인트"""
    return {"status": "healthy"}


@router.get("/api/v1/ping")
def ping() -> dict:
    return {"message": "pong"}


@router.get("/api/v1/health/detailed")
def detailed_health_check(request: Request) -> dict:
    """상세 헬스 체크 (버전, 가동 시간, 런타임, 저장소 상태)"""
    store = getattr(request.app.state, "dax_store", settings.DAX_STORE)
    checks = {"api": "ok", "store": store}
    if store == "database":
        checks["database"] = "ok" if check_connection() else "unavailable"

    return {
        "status": "degraded" if checks.get("database") == "unavailable" else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "version": APP_VERSION,
        "uptime_seconds": round(time.monotonic() - _STARTED_AT, 3),
        "system": {
            "python_version": platform.python_version(),
            "threads": threading.active_count(),
        },
        "checks": checks,
    }
