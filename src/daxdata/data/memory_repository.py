"""인메모리 DAX 저장소 (테스트/데모용)"""

import logging
import threading
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone

from daxdata.data.base import DAXRepository, page_offset
from daxdata.models.dax import BusinessKey, DAXRecord, normalize_value

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """읽기 공유 / 쓰기 배타 락"""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _clone(record: DAXRecord) -> DAXRecord:
    """내부 보관/반환용 사본"""
    return DAXRecord(**record.model_dump())


def _sort_key(record: DAXRecord) -> tuple:
    # year DESC, ticker ASC, metric ASC, company ASC
    return (-record.year, record.ticker, record.metric, record.company)


class InMemoryDAXRepository(DAXRepository):
    """프로세스 내 dict 저장소

    - _records: id → 레코드
    - _keys: 비즈니스 키 → id (upsert 매칭용 보조 인덱스)
    모든 접근은 인스턴스 소유의 ReadWriteLock 아래에서 수행한다.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._records: dict[uuid.UUID, DAXRecord] = {}
        self._keys: dict[BusinessKey, uuid.UUID] = {}

    def create(self, record: DAXRecord) -> None:
        now = datetime.now(timezone.utc)
        with self._lock.write_locked():
            if record.id is None:
                record.id = uuid.uuid4()
            record.created_at = record.created_at or now
            record.updated_at = record.updated_at or now
            record.value = normalize_value(record.value)

            self._put(record)
            self._keys.setdefault(record.business_key, record.id)

    def bulk_upsert(self, records: Sequence[DAXRecord]) -> None:
        if not records:
            return

        # 값 검증은 쓰기 전에 전부 수행 (배치 전체 반영 또는 전체 실패)
        values = [normalize_value(r.value) for r in records]

        now = datetime.now(timezone.utc)
        with self._lock.write_locked():
            for record, value in zip(records, values):
                record.value = value
                if record.id is None:
                    record.id = uuid.uuid4()
                record.updated_at = now

                existing = self._records.get(self._keys.get(record.business_key))
                if existing is not None:
                    existing.report_type = record.report_type
                    existing.value = record.value
                    existing.currency = record.currency
                    existing.updated_at = record.updated_at
                    record.id = existing.id
                    record.created_at = existing.created_at
                    continue

                record.created_at = record.created_at or now
                self._put(record)
                self._keys[record.business_key] = record.id

        logger.info("DAX upsert 완료 (memory): %d건", len(records))

    def _put(self, record: DAXRecord) -> None:
        """id 기준 저장 (같은 id의 이전 레코드 키 인덱스 정리, 쓰기 락 필요)"""
        replaced = self._records.get(record.id)
        if replaced is not None and self._keys.get(replaced.business_key) == record.id:
            del self._keys[replaced.business_key]
        self._records[record.id] = _clone(record)

    def find_all(self, page: int, limit: int) -> tuple[list[DAXRecord], int]:
        return self.find_by_filters("", None, page, limit)

    def find_by_filters(
        self,
        ticker: str,
        year: int | None,
        page: int,
        limit: int,
    ) -> tuple[list[DAXRecord], int]:
        with self._lock.read_locked():
            matched = [
                r for r in self._records.values()
                if (not ticker or r.ticker == ticker)
                and (year is None or r.year == year)
            ]
            matched.sort(key=_sort_key)
            offset = page_offset(page, limit)
            page_items = [_clone(r) for r in matched[offset:offset + limit]]
        return page_items, len(matched)

    def get_metrics(self, ticker: str) -> list[str]:
        with self._lock.read_locked():
            metrics = {r.metric for r in self._records.values() if r.ticker == ticker}
        return sorted(metrics)

    def delete_all(self) -> None:
        with self._lock.write_locked():
            removed = len(self._records)
            self._records.clear()
            self._keys.clear()
        logger.info("DAX 레코드 전체 삭제 (memory): %d건", removed)

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._records)
