"""DB 기반 DAX 저장소 (SQLite / PostgreSQL upsert)"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import delete as sa_delete, func as sa_func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from daxdata.data.base import DAXRepository, page_offset
from daxdata.database import get_engine
from daxdata.models.dax import BusinessKey, DAXRecord, normalize_value

logger = logging.getLogger(__name__)

# SQLite 변수 제한 고려 벌크 배치 크기
_BATCH_SIZE = 500

_KEY_COLUMNS = ["company", "ticker", "metric", "year"]

_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _ordering() -> tuple:
    """year DESC, ticker ASC, metric ASC, company ASC"""
    return (
        DAXRecord.year.desc(),
        DAXRecord.ticker.asc(),
        DAXRecord.metric.asc(),
        DAXRecord.company.asc(),
    )


class SQLDAXRepository(DAXRepository):
    """SQLModel 세션 기반 영속 저장소

    복합 유니크 인덱스(idx_dax_unique) + ON CONFLICT DO UPDATE로
    비즈니스 키당 1건을 보장한다. bulk_upsert는 단일 트랜잭션.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()
        dialect = self._engine.dialect.name
        if dialect not in _INSERTS:
            raise ValueError(f"upsert 미지원 DB: {dialect}")
        self._insert = _INSERTS[dialect]

    def create(self, record: DAXRecord) -> None:
        """단건 INSERT (유니크 인덱스 위반은 IntegrityError로 전파)"""
        now = datetime.now(timezone.utc)
        if record.id is None:
            record.id = uuid.uuid4()
        record.created_at = record.created_at or now
        record.updated_at = record.updated_at or now
        record.value = normalize_value(record.value)

        with Session(self._engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)

    def bulk_upsert(self, records: Sequence[DAXRecord]) -> None:
        """벌크 INSERT ... ON CONFLICT DO UPDATE (전체 성공 또는 전체 롤백)"""
        if not records:
            return

        now = datetime.now(timezone.utc)
        # 배치 내 중복 키 병합: 첫 레코드의 id/created_at + 마지막 레코드의 값
        # 입력 레코드의 created_at은 건드리지 않음 (기존 행이면 DB 값이 유지됨)
        merged: dict[BusinessKey, dict] = {}
        for record in records:
            if record.id is None:
                record.id = uuid.uuid4()
            record.updated_at = now
            record.value = normalize_value(record.value)

            row = merged.get(record.business_key)
            if row is None:
                merged[record.business_key] = {
                    "id": record.id,
                    "company": record.company,
                    "ticker": record.ticker,
                    "report_type": record.report_type,
                    "metric": record.metric,
                    "year": record.year,
                    "value": record.value,
                    "currency": record.currency,
                    "created_at": record.created_at or now,
                    "updated_at": record.updated_at,
                }
                continue

            row.update(
                report_type=record.report_type,
                value=record.value,
                currency=record.currency,
                updated_at=record.updated_at,
            )
            record.id = row["id"]

        rows = list(merged.values())
        table = DAXRecord.__table__
        with Session(self._engine) as session:
            for i in range(0, len(rows), _BATCH_SIZE):
                batch = rows[i:i + _BATCH_SIZE]
                stmt = self._insert(table).values(batch)
                stmt = stmt.on_conflict_do_update(
                    index_elements=_KEY_COLUMNS,
                    set_={
                        "report_type": stmt.excluded.report_type,
                        "value": stmt.excluded.value,
                        "currency": stmt.excluded.currency,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                session.execute(stmt)
                logger.debug("DAX upsert 배치: %d건", len(batch))
            session.commit()

        logger.info("DAX upsert 완료: 입력 %d건, 고유 키 %d건", len(records), len(rows))

    def find_all(self, page: int, limit: int) -> tuple[list[DAXRecord], int]:
        return self.find_by_filters("", None, page, limit)

    def find_by_filters(
        self,
        ticker: str,
        year: int | None,
        page: int,
        limit: int,
    ) -> tuple[list[DAXRecord], int]:
        conditions = []
        if ticker:
            conditions.append(DAXRecord.ticker == ticker)
        if year is not None:
            conditions.append(DAXRecord.year == year)

        count_stmt = select(sa_func.count()).select_from(DAXRecord)
        stmt = select(DAXRecord)
        for cond in conditions:
            count_stmt = count_stmt.where(cond)
            stmt = stmt.where(cond)

        stmt = (
            stmt.order_by(*_ordering())
            .offset(page_offset(page, limit))
            .limit(limit)
        )

        with Session(self._engine) as session:
            total = session.exec(count_stmt).one()
            records = list(session.exec(stmt).all())

        return records, int(total)

    def get_metrics(self, ticker: str) -> list[str]:
        stmt = (
            select(DAXRecord.metric)
            .where(DAXRecord.ticker == ticker)
            .distinct()
            .order_by(DAXRecord.metric)
        )
        with Session(self._engine) as session:
            return list(session.exec(stmt).all())

    def delete_all(self) -> None:
        with Session(self._engine) as session:
            result = session.execute(sa_delete(DAXRecord))
            session.commit()
        logger.info("DAX 레코드 전체 삭제: %d건", result.rowcount)

    def count(self) -> int:
        with Session(self._engine) as session:
            return int(session.exec(select(sa_func.count()).select_from(DAXRecord)).one())
