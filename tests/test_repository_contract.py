"""저장소 계약 테스트: memory/database 구현 모두 동일하게 통과해야 함"""

import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import make_record


def _keys(records):
    return [(r.year, r.ticker, r.metric, r.company) for r in records]


def _seed_grid(repo, count: int) -> None:
    tickers = ["ADS", "BMW", "SAP", "SIE", "VOW3"]
    metrics = ["EBITDA", "Net Income", "Revenue"]
    records = []
    for i in range(count):
        records.append(make_record(
            company=f"Company {tickers[i % 5]}",
            ticker=tickers[i % 5],
            metric=metrics[(i // 5) % 3],
            year=2020 + (i // 15),
            value=Decimal(i),
        ))
    repo.bulk_upsert(records)


def test_create_assigns_id(repo):
    record = make_record()
    repo.create(record)

    assert record.id is not None
    assert repo.count() == 1
    stored, total = repo.find_all(1, 10)
    assert total == 1
    assert stored[0].id == record.id
    assert stored[0].created_at is not None


def test_create_keeps_given_id(repo):
    given = uuid.uuid4()
    repo.create(make_record())
    record = make_record(ticker="SAP", company="SAP SE")
    record.id = given
    repo.create(record)

    stored, _ = repo.find_by_filters("SAP", None, 1, 10)
    assert [r.id for r in stored] == [given]


def test_create_allows_null_value(repo):
    repo.create(make_record(value=None))
    repo.create(make_record(metric="Revenue", value=Decimal("0")))

    stored, _ = repo.find_all(1, 10)
    values = {r.metric: r.value for r in stored}
    assert values["EBITDA"] is None
    assert values["Revenue"] == Decimal("0")


def test_bulk_upsert_empty_is_noop(repo):
    repo.bulk_upsert([])
    assert repo.count() == 0


def test_bulk_upsert_inserts_new_keys(repo):
    records = [
        make_record(),
        make_record(company="SAP SE", ticker="SAP", metric="Net Income"),
    ]
    repo.bulk_upsert(records)

    assert repo.count() == 2
    assert all(r.id is not None for r in records)


def test_bulk_upsert_same_key_keeps_identity(repo):
    repo.bulk_upsert([make_record(value=Decimal("100"))])
    first, _ = repo.find_all(1, 10)

    repo.bulk_upsert([
        make_record(value=Decimal("200"), report_type="cashflow", currency="USD"),
    ])
    second, total = repo.find_all(1, 10)

    assert total == 1
    assert second[0].value == Decimal("200")
    assert second[0].report_type == "cashflow"
    assert second[0].currency == "USD"
    assert second[0].id == first[0].id
    assert second[0].created_at == first[0].created_at


def test_bulk_upsert_last_record_in_batch_wins(repo):
    repo.bulk_upsert([
        make_record(value=Decimal("1")),
        make_record(value=Decimal("2")),
        make_record(value=Decimal("3")),
    ])

    stored, total = repo.find_all(1, 10)
    assert total == 1
    assert stored[0].value == Decimal("3")


def test_bulk_upsert_key_includes_company(repo):
    repo.bulk_upsert([
        make_record(company="Siemens AG"),
        make_record(company="Siemens Energy AG"),
    ])
    assert repo.count() == 2


def test_find_all_ordering(repo):
    repo.bulk_upsert([
        make_record(ticker="SAP", metric="Revenue", year=2024),
        make_record(ticker="SIE", metric="EBITDA", year=2025),
        make_record(ticker="SAP", metric="EBITDA", year=2025),
        make_record(ticker="ADS", metric="Revenue", year=2023),
        make_record(ticker="SAP", metric="Net Income", year=2025),
    ])

    stored, total = repo.find_all(1, 10)
    assert total == 5
    assert [(r.year, r.ticker, r.metric) for r in stored] == [
        (2025, "SAP", "EBITDA"),
        (2025, "SAP", "Net Income"),
        (2025, "SIE", "EBITDA"),
        (2024, "SAP", "Revenue"),
        (2023, "ADS", "Revenue"),
    ]


def test_pagination_covers_every_record_once(repo):
    _seed_grid(repo, 23)
    full, total = repo.find_all(1, 100)
    assert total == 23

    limit = 5
    pages = []
    for page in range(1, math.ceil(total / limit) + 1):
        chunk, chunk_total = repo.find_all(page, limit)
        assert chunk_total == 23
        pages.extend(chunk)

    assert _keys(pages) == _keys(full)
    assert len(set(_keys(pages))) == 23


def test_page_beyond_range_is_empty(repo):
    _seed_grid(repo, 7)

    stored, total = repo.find_all(3, 5)
    assert stored == []
    assert total == 7

    stored, total = repo.find_by_filters("SAP", None, 9, 5)
    assert stored == []
    assert total == 1


def test_find_by_filters_ticker_only(repo):
    _seed_grid(repo, 30)

    stored, total = repo.find_by_filters("SAP", None, 1, 100)
    assert total == 6
    assert {r.ticker for r in stored} == {"SAP"}


def test_find_by_filters_year_only(repo):
    _seed_grid(repo, 30)

    stored, total = repo.find_by_filters("", 2021, 1, 100)
    assert total == 15
    assert {r.year for r in stored} == {2021}


def test_find_by_filters_intersection(repo):
    _seed_grid(repo, 30)

    both, total = repo.find_by_filters("SAP", 2021, 1, 100)
    by_ticker, _ = repo.find_by_filters("SAP", None, 1, 100)
    by_year, _ = repo.find_by_filters("", 2021, 1, 100)

    expected = {r.id for r in by_ticker} & {r.id for r in by_year}
    assert {r.id for r in both} == expected
    assert total == len(expected) == 3


def test_find_by_filters_without_filters_matches_find_all(repo):
    _seed_grid(repo, 12)

    filtered, filtered_total = repo.find_by_filters("", None, 2, 5)
    everything, total = repo.find_all(2, 5)

    assert filtered_total == total == 12
    assert _keys(filtered) == _keys(everything)


def test_find_by_filters_no_match(repo):
    _seed_grid(repo, 5)

    stored, total = repo.find_by_filters("DBK", None, 1, 10)
    assert stored == []
    assert total == 0


def test_get_metrics_sorted_unique(repo):
    repo.bulk_upsert([
        make_record(metric="Revenue", year=2025),
        make_record(metric="EBITDA", year=2025),
        make_record(metric="Revenue", year=2024),
        make_record(metric="Net Income", year=2024),
        make_record(ticker="SAP", company="SAP SE", metric="Cash Flow"),
    ])

    assert repo.get_metrics("SIE") == ["EBITDA", "Net Income", "Revenue"]


def test_get_metrics_unknown_ticker(repo):
    repo.bulk_upsert([make_record()])
    assert repo.get_metrics("UNKNOWN") == []


def test_delete_all(repo):
    _seed_grid(repo, 10)
    repo.delete_all()

    assert repo.count() == 0
    stored, total = repo.find_all(1, 10)
    assert stored == []
    assert total == 0


def test_count(repo):
    assert repo.count() == 0
    _seed_grid(repo, 4)
    repo.create(make_record(ticker="DBK", company="Deutsche Bank AG"))
    assert repo.count() == 5


def _as_utc(ts: datetime) -> datetime:
    # SQLite는 타임존 없이 UTC 벽시계 값만 돌려줌
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def test_timestamps_are_utc(repo):
    before = datetime.now(timezone.utc)
    repo.bulk_upsert([make_record()])
    repo.create(make_record(metric="Revenue"))
    after = datetime.now(timezone.utc)

    stored, _ = repo.find_all(1, 10)
    assert len(stored) == 2
    for r in stored:
        assert before <= _as_utc(r.created_at) <= after
        assert before <= _as_utc(r.updated_at) <= after


def test_values_rounded_to_cents(repo):
    repo.bulk_upsert([
        make_record(metric="EPS", value=Decimal("1.234")),
        make_record(metric="Dividend", value=Decimal("0.125")),
        make_record(metric="Revenue", value=Decimal("123456789012345678.91")),
    ])
    repo.create(make_record(metric="Net Income", value=Decimal("-7.005")))

    stored, _ = repo.find_all(1, 10)
    assert {r.metric: r.value for r in stored} == {
        "EPS": Decimal("1.23"),
        "Dividend": Decimal("0.13"),
        "Revenue": Decimal("123456789012345678.91"),
        "Net Income": Decimal("-7.01"),
    }


@pytest.mark.parametrize(
    "value",
    [Decimal("1000000000000000000"), Decimal("999999999999999999.999")],
)
def test_value_out_of_range_rejected(repo, value):
    with pytest.raises(ValueError):
        repo.bulk_upsert([
            make_record(metric="Revenue"),
            make_record(metric="EBITDA", value=value),
        ])
    assert repo.count() == 0
