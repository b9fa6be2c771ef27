"""Tests for publication year extraction."""

import pytest
from structlog.testing import capture_logs

from smartbooks.catalog.dates import DATE_PARSERS, resolve_year, scan_year


class TestStructuredFormats:
    """Each supported date shape resolves to its year."""

    def test_day_month_year(self):
        assert resolve_year("29.03.2019") == 2019

    def test_month_name_day_year(self):
        assert resolve_year("Jun 15, 2012") == 2012

    def test_full_month_name(self):
        assert resolve_year("September 3, 1987") == 1987

    def test_year_month(self):
        assert resolve_year("1998-10") == 1998

    def test_bare_year(self):
        assert resolve_year("2009") == 2009

    def test_surrounding_whitespace(self):
        assert resolve_year("  2009 \n") == 2009

    def test_structured_match_does_not_log_fallback(self):
        with capture_logs() as logs:
            assert resolve_year("29.03.2019") == 2019
        assert logs == []


class TestFallback:
    """Free text falls back to a single four digit scan."""

    def test_year_in_free_text(self):
        assert resolve_year("circa the year 1975 or so") == 1975

    def test_first_year_wins(self):
        assert resolve_year("printed 1901, reissued 1950") == 1901

    def test_longer_digit_runs_are_not_years(self):
        assert resolve_year("order 123456 from 1984") == 1984

    def test_fallback_is_logged_once(self):
        with capture_logs() as logs:
            resolve_year("circa the year 1975 or so")
        events = [entry["event"] for entry in logs]
        assert events == ["Date string has no standard format, scanning for a year"]

    def test_scan_year_without_digits(self):
        assert scan_year("no digits here") is None


class TestUnresolved:
    """Missing or yearless input gives None, never 0."""

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_input(self, text):
        assert resolve_year(text) is None

    def test_no_digits(self):
        with capture_logs() as logs:
            assert resolve_year("no digits here") is None
        assert logs[-1]["event"] == "Could not extract a year from date string"
        assert logs[-1]["log_level"] == "warning"

    def test_three_digit_number(self):
        assert resolve_year("about 950 pages") is None


def test_parsers_are_tried_in_order():
    # "2012" is a valid bare year but must not be claimed by earlier parsers
    assert [parse("2012") for parse in DATE_PARSERS] == [None, None, None, 2012]
