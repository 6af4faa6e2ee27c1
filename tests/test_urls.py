from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qs, unquote, urlsplit

import pytest

from reporting_client.dates import format_date
from reporting_client.urls import UrlBuilder, escape_path, escape_segment

BASE = "http://tank.example.com:8080"


@pytest.fixture
def urls():
    return UrlBuilder(BASE)


def test_build_joins_context_service_path_and_method(urls):
    assert urls.build("/timing/csv", "42") == f"{BASE}/rest/v1/report-service/timing/csv/42"


def test_build_without_segments(urls):
    assert urls.build("/tps") == f"{BASE}/rest/v1/report-service/tps"


def test_trailing_slash_on_service_url_is_ignored():
    assert UrlBuilder(BASE + "/").build("/tps") == f"{BASE}/rest/v1/report-service/tps"


@pytest.mark.parametrize("job_id", ["job/1", "a?b=c", "x#y", "50% done", "a&b", "ü-job", "..", "a+b"])
def test_reserved_characters_round_trip(urls, job_id):
    """Identifiers with reserved characters survive as one path segment."""
    url = urls.build("/timing/csv", job_id)
    parts = urlsplit(url)

    assert parts.query == ""
    assert parts.fragment == ""
    assert unquote(parts.path.rsplit("/", 1)[-1]) == job_id


def test_build_path_keeps_separators(urls):
    url = urls.build_path("/file", "agent 1/logs/debug?.log")
    assert url.endswith("/file/agent%201/logs/debug%3F.log")


def test_escape_path_strips_outer_slashes():
    assert escape_path("/a/b/") == "a/b"


@pytest.mark.parametrize("value, escaped", [("..", "%2E%2E"), (".", "%2E"), ("...", "..."), ("a.b", "a.b")])
def test_dot_segments_are_escaped(value, escaped):
    assert escape_segment(value) == escaped


@pytest.mark.parametrize("path", ["..", "a/../b", "./a", "a//b", ""])
def test_escape_path_rejects_dot_and_empty_components(path):
    with pytest.raises(ValueError):
        escape_path(path)


def test_with_query_skips_none(urls):
    url = urls.with_query(urls.build("/timing/periodic/csv", "1"), {"minTime": "20240101-000000", "maxTime": None})
    query = parse_qs(urlsplit(url).query)
    assert query == {"minTime": ["20240101-000000"]}


def test_with_query_all_none_leaves_url_untouched(urls):
    url = urls.build("/timing/csv", "1")
    assert urls.with_query(url, {"period": None}) == url


def test_with_query_appends_to_existing_query():
    url = UrlBuilder.with_query("http://h/p?a=1", {"b": 2})
    assert url == "http://h/p?a=1&b=2"


def test_format_date_fixed_pattern():
    assert format_date(datetime(2024, 1, 1)) == "20240101-000000"
    assert format_date(datetime(2023, 12, 31, 23, 59, 58)) == "20231231-235958"


def test_format_date_plain_date_is_midnight():
    assert format_date(date(2024, 3, 5)) == "20240305-000000"


def test_format_date_does_not_shift_aware_datetimes():
    instant = datetime(2024, 6, 1, 12, 30, tzinfo=timezone(timedelta(hours=-7)))
    assert format_date(instant) == "20240601-123000"


def test_format_date_pads_early_years():
    assert format_date(datetime(999, 1, 2, 3, 4, 5)) == "09990102-030405"
    assert format_date(date(42, 12, 31)) == "00421231-000000"
