from datetime import datetime, timezone
from decimal import Decimal

from stitchdesk.printing.formatters import format_currency, format_date, format_day_month, format_quantity


def test_currency_two_decimals():
    assert format_currency(3500) == "₹3,500.00"
    assert format_currency(Decimal("0.5")) == "₹0.50"
    assert format_currency("12.345") == "₹12.35"


def test_currency_indian_grouping():
    assert format_currency(123456) == "₹1,23,456.00"
    assert format_currency(12345678) == "₹1,23,45,678.00"


def test_currency_whole_and_negative():
    assert format_currency(1999.5, whole=True) == "₹2,000"
    assert format_currency(-250) == "-₹250.00"


def test_quantity():
    assert format_quantity(Decimal("2.00")) == "2"
    assert format_quantity("2.5") == "2.5"


def test_dates():
    dt = datetime(2026, 10, 17, tzinfo=timezone.utc)
    assert format_date(dt) == "17 Oct 2026"
    assert format_day_month(dt) == "17 Oct"
    assert format_date(None) == "N/A"
    assert format_day_month(None) == "N/A"


def test_epoch_seconds_are_converted():
    assert format_date({"seconds": 0}) == "01 Jan 1970"
    assert format_date(86400) == "02 Jan 1970"
