"""Tests for minor-unit money formatting."""
from app.services.currency import format_minor_units, pounds_to_pence


def test_format_minor_units():
    assert format_minor_units(10000) == "£100.00"
    assert format_minor_units(5000, "GBP") == "£50.00"
    assert format_minor_units(7) == "£0.07"
    assert format_minor_units(0) == "£0.00"
    assert format_minor_units(-5) == "-£0.05"


def test_format_minor_units_other_currencies():
    assert format_minor_units(1999, "usd") == "$19.99"
    assert format_minor_units(1234, "XYZ") == "12.34 XYZ"


def test_pounds_to_pence():
    assert pounds_to_pence(12) == 1200
