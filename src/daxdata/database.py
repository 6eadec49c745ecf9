"""SQLModel 데이터베이스 모듈 (SQLite / PostgreSQL)"""

import logging
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, text

from daxdata.config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
    """URL에 맞는 엔진 생성

    - SQLite: 스레드 공유 허용, 인메모리 URL은 단일 커넥션(StaticPool)
    - 그 외: 고정 크기 커넥션 풀 + pre-ping
    """
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """설정 기반 공용 엔진 (최초 호출 시 생성)"""
    return build_engine(settings.database_url, echo=settings.DB_ECHO)


def create_db_and_tables(engine: Engine | None = None) -> None:
    """모든 테이블 + 복합 유니크 인덱스 생성"""
    # 모델을 import하여 SQLModel.metadata에 등록
    import daxdata.models.dax  # noqa: F401

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    logger.info("DB 스키마 준비 완료: %s", engine.url.render_as_string(hide_password=True))


def check_connection(engine: Engine | None = None) -> bool:
    """DB 연결 확인 (SELECT 1)"""
    engine = engine or get_engine()
    try:
        with Session(engine) as session:
            session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("DB 연결 확인 실패", exc_info=True)
        return False
