"""DAX CSV 파서

헤더 1행 + 데이터 행 구조. 컬럼명은 대소문자 무시, 순서 무관.
    company,ticker,report_type,metric,year,value,currency
- 모든 텍스트 필드는 앞뒤 공백 제거
- year: 정수, value: 유한 소수 (빈 값 불가, 소수 2자리 반올림, 정수부 18자리 이하)
- 빈 줄은 건너뛰며 행 번호에도 포함하지 않음
"""

import csv
import io
import re
from collections.abc import Iterator
from decimal import Decimal, InvalidOperation
from typing import IO

from daxdata.models.dax import (
    CSVRow,
    DEFAULT_CURRENCY,
    REQUIRED_CSV_FIELDS,
    normalize_value,
)
from daxdata.service.errors import DAXValidationError

_INT_RE = re.compile(r"[+-]?\d+")


def read_text(stream: IO) -> io.StringIO:
    """바이너리/텍스트 스트림 → 텍스트 버퍼 (UTF-8, BOM 허용)"""
    data = stream.read()
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DAXValidationError(f"failed to read CSV: invalid UTF-8 ({e})") from e
    return io.StringIO(data.lstrip("\ufeff"), newline="")


def validate_header(header: list[str]) -> dict[str, int]:
    """필수 컬럼 검사 후 컬럼명 → 위치 매핑 반환"""
    columns: dict[str, int] = {}
    for idx, col in enumerate(header):
        columns.setdefault(col.strip().lower(), idx)

    missing = [name for name in REQUIRED_CSV_FIELDS if name not in columns]
    if missing:
        raise DAXValidationError(
            f"missing required fields: {', '.join(missing)}",
        )
    return {name: columns[name] for name in REQUIRED_CSV_FIELDS}


def parse_row(
    row: list[str],
    columns: dict[str, int],
    width: int,
    row_num: int,
) -> CSVRow:
    """데이터 행 1개 파싱 (row_num: 1부터 시작하는 데이터 행 번호)"""
    if len(row) != width:
        raise DAXValidationError(
            f"invalid data at row {row_num}: wrong number of fields "
            f"(expected {width}, got {len(row)})",
        )

    fields = {name: row[idx].strip() for name, idx in columns.items()}

    if not _INT_RE.fullmatch(fields["year"]):
        raise DAXValidationError(
            f"invalid data at row {row_num}: invalid year: {fields['year']!r}",
        )

    try:
        value = normalize_value(Decimal(fields["value"]))
    except (InvalidOperation, ValueError):
        value = None
    if value is None:
        raise DAXValidationError(
            f"invalid data at row {row_num}: invalid value: {fields['value']!r}",
        )

    return CSVRow(
        company=fields["company"],
        ticker=fields["ticker"],
        report_type=fields["report_type"],
        metric=fields["metric"],
        year=int(fields["year"]),
        value=value,
        currency=fields["currency"] or DEFAULT_CURRENCY,
    )


def iter_rows(stream: IO) -> Iterator[CSVRow]:
    """헤더 검증 후 데이터 행을 순서대로 반환 (첫 오류에서 중단)"""
    reader = csv.reader(read_text(stream))

    try:
        header = next(reader, None)
        while header == []:
            header = next(reader, None)
    except csv.Error as e:
        raise DAXValidationError(f"failed to read CSV header: {e}") from e
    if header is None:
        raise DAXValidationError("failed to read CSV header: empty input")

    columns = validate_header(header)
    width = len(header)

    row_num = 0
    while True:
        try:
            row = next(reader, None)
        except csv.Error as e:
            raise DAXValidationError(
                f"failed to read CSV row {row_num + 1}: {e}",
            ) from e
        if row is None:
            break
        if not row:
            continue

        row_num += 1
        yield parse_row(row, columns, width, row_num)
