import re

import pytest

from app.core.errors import EmptySlugError, InvalidDateError, InvalidTimeError
from app.validation.normalizers import normalize_date, normalize_time, slugify

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Next.js Conf!!", "next-js-conf"),
        ("React Summit 2025", "react-summit-2025"),
        ("  Café  Été 2025 ", "cafe-ete-2025"),
        ("---Hello---World---", "hello-world"),
        ("AI Engineering World's Fair", "ai-engineering-world-s-fair"),
        ("C++ & Rust: Systems Day", "c-rust-systems-day"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_output_is_url_safe():
    titles = [
        "Next.js Conf!!",
        "  spaces   everywhere  ",
        "Ünïcödé Ëvent — 2025",
        "a--b__c..d",
        "-leading and trailing-",
        "MiXeD CaSe 123",
    ]
    for title in titles:
        slug = slugify(title)
        assert SLUG_PATTERN.match(slug), slug
        assert "--" not in slug


@pytest.mark.parametrize("title", ["!!!", "   ", "日本語", ""])
def test_slugify_rejects_titles_without_alphanumerics(title):
    with pytest.raises(EmptySlugError):
        slugify(title)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("October 24, 2025", "2025-10-24"),
        ("2025-10-24", "2025-10-24"),
        ("Oct 5 2025", "2025-10-05"),
        ("10/24/2025", "2025-10-24"),
        ("2025-10-24T10:00:00Z", "2025-10-24"),
        # Aware values are converted to UTC before the date is taken
        ("2025-10-24T23:30:00-05:00", "2025-10-25"),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_normalize_date_is_idempotent():
    for value in ["October 24, 2025", "2025-1-2", "March 3rd 2026", "12/31/2025"]:
        once = normalize_date(value)
        assert normalize_date(once) == once


@pytest.mark.parametrize(
    "value",
    [
        "not a date",
        "",
        "   ",
        "32 Octember",
        # Missing calendar parts are not filled in from today
        "10:00",
        "5",
        "October 2025",
        "October 24",
    ],
)
def test_normalize_date_invalid(value):
    with pytest.raises(InvalidDateError):
        normalize_date(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("9 AM", "09:00"),
        ("9 am", "09:00"),
        ("12:00 AM", "00:00"),
        ("12:00 PM", "12:00"),
        ("12 pm", "12:00"),
        ("9:30pm", "21:30"),
        ("  7:05 Am ", "07:05"),
        ("21:30", "21:30"),
        ("23:59", "23:59"),
        ("23:59:59", "23:59"),
        ("0:00", "00:00"),
        # A bare 9:00 is 24-hour, not 9 AM
        ("9:00", "09:00"),
        # Falls back to the general parser
        ("21:30:15.250", "21:30"),
    ],
)
def test_normalize_time(value, expected):
    assert normalize_time(value) == expected


@pytest.mark.parametrize(
    "value",
    ["13 AM", "0 PM", "9:75 PM", "lunchtime", "", "October 24"],
)
def test_normalize_time_invalid(value):
    with pytest.raises(InvalidTimeError):
        normalize_time(value)


def test_normalize_time_is_idempotent():
    for value in ["9 AM", "12:00 AM", "21:30", "9:30pm"]:
        once = normalize_time(value)
        assert normalize_time(once) == once
