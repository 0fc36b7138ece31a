from datetime import date

import pytest

from edgar_index.data_models.filing_models import FilingRecord
from edgar_index.data_storage.filing_catalog import FilingCatalog
from edgar_index.errors import DuplicateLocator, NotFound


def make_record(cik, form, filed_on, locator, content_hash=None):
    return FilingRecord(
        entity_id=cik,
        filed_on=filed_on,
        content_hash=content_hash or (locator[-1] * 64),
        form_type=form,
        source_locator=locator,
    )


@pytest.fixture()
def catalog(tmp_path):
    catalog = FilingCatalog(tmp_path / "edgar_filings.db")
    yield catalog
    catalog.close()


def test_record_and_lookup(catalog):
    record = make_record("320193", "10-K", "2020-10-30", "edgar/data/320193/a.txt", "a" * 64)
    catalog.record_filing(record)

    assert catalog.lookup_hash("edgar/data/320193/a.txt") == "a" * 64
    assert catalog.count() == 1


def test_duplicate_locator_is_rejected(catalog):
    record = make_record("320193", "10-K", "2020-10-30", "edgar/data/320193/a.txt")
    catalog.record_filing(record)

    with pytest.raises(DuplicateLocator):
        catalog.record_filing(record)
    assert catalog.count() == 1


def test_lookup_of_unknown_locator_raises_not_found(catalog):
    with pytest.raises(NotFound):
        catalog.lookup_hash("edgar/data/1/missing.txt")


def test_insert_if_absent_keeps_first_hash(catalog):
    first = make_record("1", "10-K", "2020-01-01", "edgar/data/1/x.txt", "1" * 64)
    second = make_record("1", "10-K", "2020-01-01", "edgar/data/1/x.txt", "2" * 64)

    assert catalog.insert_if_absent(first) == "1" * 64
    assert catalog.insert_if_absent(second) == "1" * 64
    assert catalog.count() == 1


def test_latest_by_form_includes_amendments_by_prefix(catalog):
    catalog.record_filing(make_record("1", "10-K", "2020-01-01", "edgar/data/1/a.txt"))
    catalog.record_filing(make_record("1", "10-K/A", "2021-01-01", "edgar/data/1/b.txt"))

    results = list(catalog.latest_by_form("10-K"))

    assert len(results) == 1
    assert results[0].entity_id == "0000000001"
    assert results[0].filed_on == date(2021, 1, 1)
    assert results[0].form_type == "10-K/A"
    assert results[0].is_amendment


def test_latest_by_form_can_exclude_amendments(catalog):
    catalog.record_filing(make_record("1", "10-K", "2020-01-01", "edgar/data/1/a.txt"))
    catalog.record_filing(make_record("1", "10-K/A", "2021-01-01", "edgar/data/1/b.txt"))

    results = list(catalog.latest_by_form("10-K", exclude_amendments=True))

    assert [r.filed_on for r in results] == [date(2020, 1, 1)]


def test_latest_by_form_returns_one_record_per_entity(catalog):
    catalog.record_filing(make_record("1", "10-K", "2019-03-01", "edgar/data/1/a.txt"))
    catalog.record_filing(make_record("1", "10-K", "2020-03-01", "edgar/data/1/b.txt"))
    catalog.record_filing(make_record("2", "10-K", "2018-03-01", "edgar/data/2/c.txt"))
    # same-day tie: exactly one of the two comes back
    catalog.record_filing(make_record("3", "10-K", "2020-06-01", "edgar/data/3/d.txt"))
    catalog.record_filing(make_record("3", "10-K", "2020-06-01", "edgar/data/3/e.txt"))
    catalog.record_filing(make_record("4", "10-Q", "2021-01-01", "edgar/data/4/f.txt"))

    results = {r.entity_id: r for r in catalog.latest_by_form("10-K")}

    assert sorted(results) == ["0000000001", "0000000002", "0000000003"]
    assert results["0000000001"].source_locator == "edgar/data/1/b.txt"
    assert results["0000000002"].filed_on == date(2018, 3, 1)
    assert results["0000000003"].source_locator in ("edgar/data/3/d.txt", "edgar/data/3/e.txt")


def test_latest_by_form_is_lazy_and_can_stop_early(catalog):
    for cik in range(1, 6):
        catalog.record_filing(make_record(str(cik), "8-K", "2022-05-0%d" % cik, f"edgar/data/{cik}/a.txt"))

    records = catalog.latest_by_form("8-K")
    first = next(records)
    records.close()

    assert first.form_type == "8-K"
    assert catalog.count() == 5


def test_prefix_wildcards_are_escaped(catalog):
    catalog.record_filing(make_record("1", "10-K", "2020-01-01", "edgar/data/1/a.txt"))

    assert list(catalog.latest_by_form("10_K")) == []
    assert list(catalog.latest_by_form("%")) == []
