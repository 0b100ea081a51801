"""
Tests for list filtering, sorting and aggregation
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from packages.common.schemas.records import Receipt
from packages.domain.listing import views
from packages.domain.listing.filters import (
    ALL,
    ListQuery,
    RecordView,
    apply_query,
    count_where,
    field_equals,
    resolve,
    sort_by_date_desc,
    sum_field,
    within_dates,
)

from tests.conftest import RECEIPTS

DOCS = RecordView(
    name="docs",
    date_field="date",
    search_fields=("number", "account.name", "notes"),
    categorical_fields={"method": "method"},
)


def doc(number, when, method="Cash", amount=0, account="Kano Dairy Depot", notes=None):
    return {
        "number": number,
        "date": when,
        "method": method,
        "amount": amount,
        "account": {"name": account},
        "notes": notes,
    }


@pytest.fixture
def docs():
    return [
        doc("D-1", "2024-01-10", "Cash", 100, "Kano Dairy Depot"),
        doc("D-2", "2024-02-05", "Transfer", 250, "Zaria Retail", notes="Part payment"),
        doc("D-3", "2024-03-01", "Cash", 75, "Kaduna Shop"),
        doc("D-4", "garbage", "Cash", 40, "Kano Dairy Depot"),
        doc("D-5", None, "Cheque", 10, "Zaria Retail"),
    ]


@pytest.fixture
def receipts():
    return [Receipt.model_validate(r) for r in RECEIPTS]


class TestDateRange:

    def test_february_window(self):
        records = [doc("A", "2024-01-10"), doc("B", "2024-02-05"), doc("C", "2024-03-01")]
        query = ListQuery(date_from=date(2024, 2, 1), date_to=date(2024, 2, 28))

        result = apply_query(records, DOCS, query)

        assert [r["number"] for r in result.items] == ["B"]
        assert result.total == 3
        assert result.matched == 1

    def test_bounds_are_inclusive_days(self):
        records = [doc("start", "2024-02-01 00:00:00"), doc("end", "2024-02-28 23:59:59")]
        query = ListQuery(date_from=date(2024, 2, 1), date_to=date(2024, 2, 28))
        assert apply_query(records, DOCS, query).matched == 2

    def test_single_bound(self, docs):
        result = apply_query(docs, DOCS, ListQuery(date_from=date(2024, 2, 1)))
        assert [r["number"] for r in result.items] == ["D-3", "D-2"]

        result = apply_query(docs, DOCS, ListQuery(date_to=date(2024, 1, 31)))
        assert [r["number"] for r in result.items] == ["D-1"]

    def test_unreadable_dates_fail_active_date_filter(self, docs):
        result = apply_query(docs, DOCS, ListQuery(date_from=date(2000, 1, 1)))
        numbers = {r["number"] for r in result.items}
        assert "D-4" not in numbers
        assert "D-5" not in numbers
        assert len(numbers) == 3

    def test_unreadable_dates_kept_without_date_filter(self, docs):
        assert apply_query(docs, DOCS).matched == len(docs)

    def test_within_dates_missing_date(self):
        assert within_dates(None) is True
        assert within_dates(None, date_from=date(2024, 1, 1)) is False
        assert within_dates(datetime(2024, 1, 1, 12), date(2024, 1, 1), date(2024, 1, 1)) is True


class TestSorting:

    def test_newest_first_with_undated_last(self, docs):
        result = apply_query(docs, DOCS)
        assert [r["number"] for r in result.items] == ["D-3", "D-2", "D-1", "D-4", "D-5"]

    def test_each_date_read_once_with_date_filter(self, docs):
        reads = []

        def read_date(record):
            reads.append(record["number"])
            return record["date"]

        counted = RecordView(name="docs", date_field=read_date, search_fields=("number",))
        result = apply_query(docs, counted, ListQuery(date_from=date(2024, 1, 1)))

        assert [r["number"] for r in result.items] == ["D-3", "D-2", "D-1"]
        assert sorted(reads) == sorted(d["number"] for d in docs)

    def test_sort_by_date_desc_matches_apply_query(self, docs):
        assert sort_by_date_desc(docs, DOCS) == apply_query(docs, DOCS).items

    def test_does_not_mutate_input(self, docs):
        before = [d["number"] for d in docs]
        apply_query(docs, DOCS, ListQuery(search="zaria"))
        assert [d["number"] for d in docs] == before


class TestSearch:

    def test_case_insensitive_substring(self, docs):
        result = apply_query(docs, DOCS, ListQuery(search="ZARIA"))
        assert {r["number"] for r in result.items} == {"D-2", "D-5"}

    def test_any_field_matches(self, docs):
        result = apply_query(docs, DOCS, ListQuery(search="part pay"))
        assert [r["number"] for r in result.items] == ["D-2"]

    @pytest.mark.parametrize("search", [None, ""])
    def test_empty_search_passes_everything(self, docs, search):
        assert apply_query(docs, DOCS, ListQuery(search=search)).matched == len(docs)

    def test_no_match(self, docs):
        result = apply_query(docs, DOCS, ListQuery(search="lagos"))
        assert result.items == []
        assert result.total == len(docs)


class TestCategories:

    def test_exact_match(self, docs):
        result = apply_query(docs, DOCS, ListQuery(categories={"method": "Cash"}))
        assert {r["number"] for r in result.items} == {"D-1", "D-3", "D-4"}

    @pytest.mark.parametrize("value", [ALL, None, ""])
    def test_sentinel_disables_filter(self, docs, value):
        assert apply_query(docs, DOCS, ListQuery(categories={"method": value})).matched == len(docs)

    def test_match_is_exact_not_substring(self, docs):
        assert apply_query(docs, DOCS, ListQuery(categories={"method": "Cas"})).matched == 0

    def test_undeclared_name_reads_attribute_path(self, docs):
        result = apply_query(docs, DOCS, ListQuery(categories={"account.name": "Kaduna Shop"}))
        assert [r["number"] for r in result.items] == ["D-3"]

    def test_receipt_payment_bucket(self, receipts):
        cash = apply_query(receipts, views.RECEIPTS, ListQuery(categories={"payment_bucket": "Cash"}))
        bank = apply_query(receipts, views.RECEIPTS, ListQuery(categories={"payment_bucket": "Bank"}))
        assert {r.receipt_number for r in cash.items} == {"RCP-002", "RCP-004"}
        assert {r.receipt_number for r in bank.items} == {"RCP-001", "RCP-003"}


class TestComposition:

    def test_filters_are_anded(self, docs):
        query = ListQuery(search="kano", categories={"method": "Cash"}, date_from=date(2024, 1, 1))
        result = apply_query(docs, DOCS, query)
        assert [r["number"] for r in result.items] == ["D-1"]

    def test_idempotent(self, docs):
        query = ListQuery(search="a", categories={"method": "Cash"})
        once = apply_query(docs, DOCS, query)
        twice = apply_query(once.items, DOCS, query)
        assert twice.items == once.items

    def test_adding_filters_never_grows_result(self, docs):
        queries = [
            ListQuery(),
            ListQuery(search="a"),
            ListQuery(search="a", categories={"method": "Cash"}),
            ListQuery(search="a", categories={"method": "Cash"}, date_from=date(2024, 1, 1)),
            ListQuery(search="a", categories={"method": "Cash"}, date_from=date(2024, 1, 1),
                      date_to=date(2024, 1, 31)),
        ]
        sizes = [apply_query(docs, DOCS, q).matched for q in queries]
        assert sizes == sorted(sizes, reverse=True)

    def test_with_category_returns_new_query(self):
        query = ListQuery(search="x")
        updated = query.with_category("method", "Cash")
        assert query.categories == {}
        assert updated.active_categories == {"method": "Cash"}
        assert updated.search == "x"


class TestAggregation:

    def test_sum_matches_manual_filter_and_sum(self, receipts):
        query = ListQuery(date_from=date(2024, 2, 1), date_to=date(2024, 2, 29))
        page = apply_query(receipts, views.RECEIPTS, query)

        expected = Decimal(0)
        for r in receipts:
            if r.receipt_date and datetime(2024, 2, 1) <= r.receipt_date <= datetime(2024, 2, 29, 23, 59, 59):
                expected += r.amount_received

        assert sum_field(page.items, "amount_received") == expected == Decimal("12500.5")

    def test_sum_with_secondary_predicate(self, receipts):
        cash = sum_field(receipts, "amount_received", where=field_equals("payment_method", "Cash"))
        assert cash == Decimal("2500.5") + Decimal("700")

    def test_sum_tolerates_missing_and_bad_values(self):
        rows = [{"v": "10"}, {"v": None}, {"v": "abc"}, {}, {"v": 2.5}]
        assert sum_field(rows, "v") == Decimal("12.5")

    def test_sum_of_nothing_is_zero(self):
        assert sum_field([], "amount") == Decimal(0)

    def test_count_where(self, docs):
        assert count_where(docs) == 5
        assert count_where(docs, field_equals("method", "Cash", "Cheque")) == 4


class TestResolve:

    def test_nested_mapping_and_attribute(self, receipts):
        assert resolve({"a": {"b": 1}}, "a.b") == 1
        assert resolve(receipts[0], "receipt_number") == "RCP-001"

    def test_missing_path_is_none(self):
        assert resolve({"a": None}, "a.b") is None
        assert resolve({}, "x.y.z") is None
