import csv
import io
from datetime import date, timezone

from courier_desk.models.domain import CourierEntry, CourierStatus, ReportFilters
from courier_desk.services.reports import export_to_csv, filter_entries, report_filename, summarize_entries
from courier_desk.services.reports.csv_export import CSV_HEADERS, format_datetime

UTC = timezone.utc


def _entry(
    entry_id: str,
    created_at: str,
    status: CourierStatus = CourierStatus.PENDING,
    **overrides,
) -> CourierEntry:
    values = dict(
        id=entry_id,
        invoice=f"INV-{entry_id}",
        recipient_name="Rahim Uddin",
        recipient_phone="01712345678",
        recipient_address="House 1, Road 2, Dhaka",
        cod_amount=1500,
        note="",
        status=status,
        created_at=created_at,
    )
    values.update(overrides)
    return CourierEntry(**values)


ENTRIES = [
    _entry("a", "2024-01-09T23:59:00Z"),
    _entry("b", "2024-01-10T00:00:00Z", CourierStatus.DELIVERED),
    _entry("c", "2024-01-15T12:00:00Z", recipient_name="Karim", note="Fragile glass"),
    _entry("d", "2024-01-20T08:30:00Z", CourierStatus.CANCELLED, invoice="SPECIAL-1"),
]


def _ids(entries) -> list[str]:
    return [entry.id for entry in entries]


def test_no_filters_returns_everything_in_order() -> None:
    assert _ids(filter_entries(ENTRIES, ReportFilters(), tz=UTC)) == ["a", "b", "c", "d"]


def test_date_from_boundary_is_inclusive() -> None:
    result = filter_entries(ENTRIES, ReportFilters(date_from="2024-01-10"), tz=UTC)

    assert _ids(result) == ["b", "c", "d"]


def test_date_to_covers_the_whole_day() -> None:
    result = filter_entries(ENTRIES, ReportFilters(date_to="2024-01-15"), tz=UTC)

    assert _ids(result) == ["a", "b", "c"]


def test_date_filter_uses_report_timezone() -> None:
    from zoneinfo import ZoneInfo

    # 23:59 UTC on the 9th is already the 10th in Dhaka
    result = filter_entries(ENTRIES, ReportFilters(date_from="2024-01-10"), tz=ZoneInfo("Asia/Dhaka"))

    assert _ids(result) == ["a", "b", "c", "d"]


def test_status_filter() -> None:
    assert _ids(filter_entries(ENTRIES, ReportFilters(status="delivered"), tz=UTC)) == ["b"]
    assert _ids(filter_entries(ENTRIES, ReportFilters(status="all"), tz=UTC)) == ["a", "b", "c", "d"]


def test_search_is_case_insensitive_across_fields() -> None:
    assert _ids(filter_entries(ENTRIES, ReportFilters(search_term="karim"), tz=UTC)) == ["c"]
    assert _ids(filter_entries(ENTRIES, ReportFilters(search_term="FRAGILE"), tz=UTC)) == ["c"]
    assert _ids(filter_entries(ENTRIES, ReportFilters(search_term="special"), tz=UTC)) == ["d"]


def test_unparseable_created_at_only_dropped_when_dates_filtered() -> None:
    entries = ENTRIES + [_entry("e", "not a date")]

    assert "e" in _ids(filter_entries(entries, ReportFilters(), tz=UTC))
    assert "e" not in _ids(filter_entries(entries, ReportFilters(date_from="2024-01-01"), tz=UTC))


def test_summarize_entries() -> None:
    summary = summarize_entries(ENTRIES[:2])

    assert summary == {"count": 2, "total_cod": 3000}


def test_export_header_and_row_layout() -> None:
    exported = export_to_csv([ENTRIES[1]], tz=UTC)
    lines = exported.split("\n")

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == (
        'INV-b,Rahim Uddin,01712345678,"House 1, Road 2, Dhaka",1500,delivered,"",10 Jan 2024 00:00'
    )
    assert not exported.endswith("\n")


def test_export_doubles_quotes_in_address() -> None:
    entry = _entry("q", "2024-01-10T00:00:00Z", recipient_address='He said "hi"')

    exported = export_to_csv([entry], tz=UTC)

    assert '"He said ""hi"""' in exported


def test_export_parses_as_fixed_width_csv() -> None:
    entries = ENTRIES + [
        _entry("q", "2024-01-10T00:00:00Z", recipient_address='He said "hi", twice', note="Leave, at gate"),
    ]

    rows = list(csv.reader(io.StringIO(export_to_csv(entries, tz=UTC))))

    assert rows[0] == list(CSV_HEADERS)
    assert len(rows) == len(entries) + 1
    for row in rows[1:]:
        assert len(row) == len(CSV_HEADERS)
    assert rows[-1][3] == 'He said "hi", twice'
    assert rows[-1][6] == "Leave, at gate"
    assert rows[-1][7] == "10 Jan 2024 00:00"


def test_export_with_no_entries_is_header_only() -> None:
    assert export_to_csv([], tz=UTC) == ",".join(CSV_HEADERS)


def test_format_datetime_is_locale_independent() -> None:
    assert format_datetime("2024-03-05T14:30:00Z", UTC) == "05 Mar 2024 14:30"
    assert format_datetime("garbage", UTC) == "garbage"


def test_report_filename() -> None:
    assert report_filename(date(2024, 1, 31)) == "courier-report-2024-01-31.csv"
