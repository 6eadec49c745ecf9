"""DAX 재무지표 모델"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import Index, Numeric, String, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

DEFAULT_CURRENCY = "EUR"

# CSV 필수 컬럼 (표준 순서)
REQUIRED_CSV_FIELDS: tuple[str, ...] = (
    "company",
    "ticker",
    "report_type",
    "metric",
    "year",
    "value",
    "currency",
)

BusinessKey = tuple[str, str, str, int]

# NUMERIC(20,2): 정수부 최대 18자리, 소수 2자리
_CENT = Decimal("0.01")
_MAX_ABS_VALUE = Decimal(10) ** 18


def normalize_value(value: Decimal | None) -> Decimal | None:
    """지표 값을 소수 2자리로 반올림 (범위 초과/비유한 값은 ValueError)"""
    if value is None:
        return None
    value = Decimal(value)
    if not value.is_finite() or abs(value) >= _MAX_ABS_VALUE:
        raise ValueError(f"value out of range: {value}")
    value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    if abs(value) >= _MAX_ABS_VALUE:
        raise ValueError(f"value out of range: {value}")
    return value


class DecimalAmount(TypeDecorator):
    """NUMERIC(20,2) 컬럼

    SQLite는 NUMERIC을 REAL로 저장하므로 문자열로 보관해 자릿수를 보존한다.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self) -> None:
        super().__init__(precision=20, scale=2)

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(32))
        return super().load_dialect_impl(dialect)

    def process_bind_param(self, value, dialect):
        value = normalize_value(value)
        if value is not None and dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class DAXRecord(SQLModel, table=True):
    """DAX 재무지표 테이블 (회사/티커/지표/연도 당 1건)"""

    __tablename__ = "dax"
    __table_args__ = (
        # upsert 충돌 판정용 복합 유니크 인덱스
        UniqueConstraint(
            "company", "ticker", "metric", "year", name="idx_dax_unique",
        ),
        Index("idx_ticker_year", "ticker", "year"),
    )

    id: uuid.UUID | None = Field(default=None, primary_key=True)
    company: str = Field(max_length=255, description="회사명")
    ticker: str = Field(max_length=10, description="종목 코드")
    report_type: str = Field(
        default="", max_length=50, description="보고서 구분 (예: income)",
    )
    metric: str = Field(max_length=100, description="지표명 (예: EBITDA)")
    year: int = Field(description="회계연도")
    value: Decimal | None = Field(
        default=None,
        sa_type=DecimalAmount,
        description="지표 값 (미보고 시 None, 0과 구분)",
    )
    currency: str = Field(
        default=DEFAULT_CURRENCY, max_length=3, description="통화 코드",
    )
    created_at: datetime | None = Field(default=None, description="생성 시각")
    updated_at: datetime | None = Field(default=None, description="수정 시각")

    @property
    def business_key(self) -> BusinessKey:
        """(company, ticker, metric, year) 복합 비즈니스 키"""
        return (self.company, self.ticker, self.metric, self.year)

    def __repr__(self) -> str:
        return (
            f"<DAXRecord {self.ticker} {self.metric} {self.year} "
            f"= {self.value} {self.currency}>"
        )


@dataclass
class CSVRow:
    """CSV 데이터 행 (공백 제거 + 타입 변환 완료)"""

    company: str
    ticker: str
    report_type: str
    metric: str
    year: int
    value: Decimal
    currency: str

    def to_record(self) -> DAXRecord:
        """저장 전 DAXRecord 변환 (id/시각은 저장소에서 부여)"""
        return DAXRecord(
            company=self.company,
            ticker=self.ticker,
            report_type=self.report_type,
            metric=self.metric,
            year=self.year,
            value=self.value,
            currency=self.currency or DEFAULT_CURRENCY,
        )
