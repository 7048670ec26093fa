"""Unit tests for display formatters."""

import pytest

from monet.utils.formatters import format_cents


@pytest.mark.parametrize(
    "cents,expected",
    [
        (8455, "$84.55"),
        (0, "$0.00"),
        (5, "$0.05"),
        (123456789, "$1,234,567.89"),
        (-100, "-$1.00"),
    ],
)
def test_format_cents(cents, expected):
    """Cents render as dollars with two decimals."""
    assert format_cents(cents) == expected
