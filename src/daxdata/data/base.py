"""DAX 저장소 추상 인터페이스 + 팩토리"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy.engine import Engine

from daxdata.models.dax import DAXRecord


class DAXRepository(ABC):
    """DAX 레코드 저장소 ABC

    구현체(DB/인메모리)는 정렬, 페이지 범위 초과, 비즈니스 키 upsert에 대해
    동일하게 동작해야 한다.
    - 정렬: year DESC, ticker ASC, metric ASC (동률 시 company ASC)
    - 페이지: 1부터 시작, 범위 초과 시 빈 목록 + 전체 건수
    """

    @abstractmethod
    def create(self, record: DAXRecord) -> None:
        """단건 저장 (id 없으면 부여, 비즈니스 키 검사 없음)"""
        ...

    @abstractmethod
    def bulk_upsert(self, records: Sequence[DAXRecord]) -> None:
        """(company, ticker, metric, year) 기준 일괄 upsert

        충돌 시 기존 id/created_at 유지, report_type/value/currency/updated_at 교체.
        같은 배치 안에서는 뒤에 온 레코드가 이긴다.
        """
        ...

    @abstractmethod
    def find_all(self, page: int, limit: int) -> tuple[list[DAXRecord], int]:
        """전체 조회 (페이지 목록, 전체 건수)"""
        ...

    @abstractmethod
    def find_by_filters(
        self,
        ticker: str,
        year: int | None,
        page: int,
        limit: int,
    ) -> tuple[list[DAXRecord], int]:
        """ticker/year 필터 조회 (빈 ticker, None year는 조건 없음)"""
        ...

    @abstractmethod
    def get_metrics(self, ticker: str) -> list[str]:
        """티커의 지표명 목록 (정렬, 중복 제거)"""
        ...

    @abstractmethod
    def delete_all(self) -> None:
        """전체 삭제 (관리/테스트용)"""
        ...

    @abstractmethod
    def count(self) -> int:
        """전체 레코드 수"""
        ...


def page_offset(page: int, limit: int) -> int:
    """1-indexed 페이지 → offset"""
    return (max(page, 1) - 1) * limit


def create_repository(
    kind: str,
    engine: Engine | None = None,
) -> DAXRepository:
    """설정값에 따른 저장소 생성

    Args:
        kind: "database" | "memory"
        engine: DB 저장소용 엔진 (생략 시 설정 기반 공용 엔진)
    """
    match kind.lower():
        case "database":
            from daxdata.data.sql_repository import SQLDAXRepository
            return SQLDAXRepository(engine=engine)

        case "memory":
            from daxdata.data.memory_repository import InMemoryDAXRepository
            return InMemoryDAXRepository()

        case _:
            raise ValueError(
                f"지원하지 않는 저장소: {kind}. database/memory 중 선택",
            )
