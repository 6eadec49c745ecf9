"""DAX CSV 가져오기 스크립트

사용법:
    # 설정된 저장소(DB)로 CSV 가져오기
    uv run python -m scripts.import_dax --file data/dax.csv

    # 기존 데이터 전체 삭제 후 가져오기 + 티커 지표 확인
    uv run python -m scripts.import_dax --file data/dax.csv --reset --metrics SIE

    # 인메모리 저장소로 검증만 (저장 안 됨)
    uv run python -m scripts.import_dax --file data/dax.csv --store memory
"""

import argparse
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("import_dax")


def main(argv: list[str] | None = None) -> int:
    from daxdata.config import settings
    from daxdata.data.base import create_repository
    from daxdata.database import create_db_and_tables
    from daxdata.service import DAXService, DAXStorageError, DAXValidationError

    parser = argparse.ArgumentParser(
        description="DAX CSV 가져오기",
    )
    parser.add_argument(
        "--file",
        type=Path,
        required=True,
        help="CSV 파일 경로 (company,ticker,report_type,metric,year,value,currency)",
    )
    parser.add_argument(
        "--store",
        choices=["database", "memory"],
        default=settings.DAX_STORE,
        help="저장소 (기본: 설정값 DAX_STORE)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="가져오기 전 기존 레코드 전체 삭제",
    )
    parser.add_argument(
        "--metrics",
        type=str,
        default=None,
        help="가져온 뒤 지표 목록을 출력할 티커",
    )
    args = parser.parse_args(argv)

    if args.store == "database":
        create_db_and_tables()
    service = DAXService(create_repository(args.store))

    if args.reset:
        service.repository.delete_all()

    try:
        with args.file.open("rb") as f:
            result = service.import_csv(f)
    except FileNotFoundError:
        logger.error("파일 없음: %s", args.file)
        return 1
    except (DAXValidationError, DAXStorageError) as e:
        logger.error("가져오기 실패: %s", e)
        return 1

    logger.info("%s (저장소 전체 %d건)", result.message, service.repository.count())

    if args.metrics:
        metrics = service.get_metrics(args.metrics)
        logger.info(
            "%s 지표 %d개: %s",
            metrics.ticker, len(metrics.metrics), ", ".join(metrics.metrics) or "-",
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
