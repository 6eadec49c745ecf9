"""FastAPI 앱 진입점"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from daxdata.api.dax import router as dax_router
from daxdata.api.health import router as health_router
from daxdata.config import APP_VERSION, settings
from daxdata.data.base import create_repository
from daxdata.database import create_db_and_tables
from daxdata.service import DAXService

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """앱 시작/종료 라이프사이클"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    # 시작: 저장소 선택 (DB면 테이블 생성) + 서비스 구성
    store = settings.DAX_STORE.lower()
    if store == "database":
        create_db_and_tables()
    app.state.dax_store = store
    app.state.dax_service = DAXService(create_repository(store))
    logger.info("DAX 저장소: %s", store)
    yield


app = FastAPI(
    title="DAX 재무지표 API",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(health_router, tags=["health"])
app.include_router(dax_router, prefix="/api/v1/dax", tags=["dax"])
