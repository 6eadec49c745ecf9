"""DAX CSV 가져오기 + 조회 서비스"""

import logging
import math
from dataclasses import dataclass, field
from typing import IO

from daxdata.data.base import DAXRepository
from daxdata.models.dax import DAXRecord
from daxdata.service.csv_parser import iter_rows
from daxdata.service.errors import DAXStorageError, DAXValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class PaginationMeta:
    """페이지 메타데이터 (전체 건수/페이지 수는 조회 시 계산)"""

    page: int
    limit: int
    total_count: int
    total_pages: int


@dataclass
class PaginatedResult:
    """페이지 조회 결과"""

    data: list[DAXRecord]
    pagination: PaginationMeta


@dataclass
class MetricsResult:
    """티커별 지표명 목록"""

    ticker: str
    metrics: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """CSV 가져오기 결과"""

    records_imported: int
    message: str


def normalize_pagination(page: int, limit: int) -> tuple[int, int]:
    """page < 1 → 1, limit 범위(1~100) 밖 → 10"""
    if page < 1:
        page = 1
    if limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    return page, limit


class DAXService:
    """DAX 저장소 위의 검증/가져오기/조회 계층 (저장소 구현과 무관)"""

    def __init__(self, repo: DAXRepository) -> None:
        self._repo = repo

    @property
    def repository(self) -> DAXRepository:
        return self._repo

    def import_csv(self, stream: IO) -> ImportResult:
        """CSV 전체 파싱 후 단일 bulk_upsert

        파싱 단계의 첫 오류에서 전체 중단하며 저장소는 건드리지 않는다.

        Raises:
            DAXValidationError: 헤더 누락, 행 형식/값 오류, 데이터 행 없음
            DAXStorageError: bulk_upsert 실패
        """
        try:
            rows = list(iter_rows(stream))
        except DAXValidationError as e:
            logger.warning("DAX CSV 검증 실패: %s", e)
            raise

        if not rows:
            logger.warning("DAX CSV 데이터 행 없음")
            raise DAXValidationError("no records found in CSV")

        records = [row.to_record() for row in rows]
        try:
            self._repo.bulk_upsert(records)
        except Exception as e:
            logger.exception("DAX 레코드 저장 실패: %d건", len(records))
            raise DAXStorageError(f"failed to import records: {e}") from e

        logger.info("DAX CSV 가져오기 완료: %d건", len(records))
        return ImportResult(
            records_imported=len(records),
            message=f"Successfully imported {len(records)} records",
        )

    def get_all(self, page: int, limit: int) -> PaginatedResult:
        """전체 조회 (페이지네이션)"""
        page, limit = normalize_pagination(page, limit)
        records, total = self._repo.find_all(page, limit)
        return self._paginate(records, total, page, limit)

    def get_by_filters(
        self,
        ticker: str,
        year: int | None,
        page: int,
        limit: int,
    ) -> PaginatedResult:
        """ticker/year 필터 조회 (둘 다 없으면 전체 조회와 동일)"""
        page, limit = normalize_pagination(page, limit)
        records, total = self._repo.find_by_filters(ticker, year, page, limit)
        return self._paginate(records, total, page, limit)

    def get_metrics(self, ticker: str) -> MetricsResult:
        """티커의 지표명 목록 (데이터 없으면 빈 목록)"""
        ticker = (ticker or "").strip()
        if not ticker:
            raise DAXValidationError("ticker is required")

        metrics = self._repo.get_metrics(ticker)
        return MetricsResult(ticker=ticker, metrics=list(metrics))

    @staticmethod
    def _paginate(
        records: list[DAXRecord],
        total: int,
        page: int,
        limit: int,
    ) -> PaginatedResult:
        return PaginatedResult(
            data=records,
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total_count=total,
                total_pages=math.ceil(total / limit),
            ),
        )
