"""DAX API 라우터"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from pydantic import BaseModel

from daxdata.models.dax import DAXRecord
from daxdata.service import DAXService, DAXValidationError

logger = logging.getLogger(__name__)
router = APIRouter()


# --- 응답 스키마 ---

class DAXRecordResult(BaseModel):
    """DAX 레코드"""
    id: str
    company: str
    ticker: str
    report_type: str
    metric: str
    year: int
    value: float | None = None
    currency: str
    created_at: str | None = None
    updated_at: str | None = None


class PaginationResult(BaseModel):
    """페이지 메타데이터"""
    page: int
    limit: int
    total_count: int
    total_pages: int


class PaginatedResponse(BaseModel):
    """페이지 조회 응답"""
    data: list[DAXRecordResult]
    pagination: PaginationResult


class MetricsResponse(BaseModel):
    """티커별 지표 목록 응답"""
    ticker: str
    metrics: list[str]


class ImportResponse(BaseModel):
    """CSV 가져오기 응답"""
    records_imported: int
    message: str


def get_dax_service(request: Request) -> DAXService:
    """앱 lifespan에서 구성한 서비스 (FastAPI Depends 용)"""
    return request.app.state.dax_service


def _to_record_result(r: DAXRecord) -> DAXRecordResult:
    """DAXRecord 모델 → API 응답 변환"""
    return DAXRecordResult(
        id=str(r.id),
        company=r.company,
        ticker=r.ticker,
        report_type=r.report_type,
        metric=r.metric,
        year=r.year,
        value=float(r.value) if r.value is not None else None,
        currency=r.currency,
        created_at=r.created_at.isoformat() if r.created_at else None,
        updated_at=r.updated_at.isoformat() if r.updated_at else None,
    )


def _parse_int_query(value: str | None, default: int) -> int:
    """정수 쿼리 파싱 (없음/형식 오류/1 미만 → 기본값)"""
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


# --- 엔드포인트 ---

@router.post("/import")
def import_csv(
    file: UploadFile | None = File(None, description="DAX CSV 파일"),
    service: DAXService = Depends(get_dax_service),
) -> ImportResponse:
    """CSV 업로드 → 일괄 upsert"""
    if file is None:
        raise HTTPException(status_code=400, detail="file is required")

    try:
        result = service.import_csv(file.file)
    except DAXValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("DAX 가져오기 실패: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return ImportResponse(**asdict(result))


@router.get("")
def get_records(
    ticker: str | None = Query(None, description="종목 코드"),
    year: str | None = Query(None, description="회계연도"),
    page: str | None = Query(None, description="페이지 (1부터)"),
    limit: str | None = Query(None, description="페이지 크기 (최대 100)"),
    service: DAXService = Depends(get_dax_service),
) -> PaginatedResponse:
    """DAX 레코드 조회 (ticker/year 필터 선택)"""
    year_value: int | None = None
    if year:
        try:
            year_value = int(year)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid year parameter")

    try:
        result = service.get_by_filters(
            ticker or "",
            year_value,
            _parse_int_query(page, 1),
            _parse_int_query(limit, 10),
        )
    except Exception as e:
        logger.error("DAX 조회 실패: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return PaginatedResponse(
        data=[_to_record_result(r) for r in result.data],
        pagination=PaginationResult(**asdict(result.pagination)),
    )


@router.get("/metrics")
def get_metrics(
    ticker: str | None = Query(None, description="종목 코드"),
    service: DAXService = Depends(get_dax_service),
) -> MetricsResponse:
    """티커별 사용 가능한 지표명 목록"""
    if not ticker:
        raise HTTPException(status_code=400, detail="ticker parameter is required")

    try:
        result = service.get_metrics(ticker)
    except DAXValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("DAX 지표 조회 실패: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return MetricsResponse(ticker=result.ticker, metrics=result.metrics)
