"""
Formatters utility.

Display helpers for money values. Money is integer cents everywhere; these
functions only produce strings.
"""


def format_cents(cents: int) -> str:
    """
    Format an integer cent amount as a dollar string.

    Args:
        cents: Amount in cents

    Returns:
        String like "$84.55" or "-$1.00"
    """
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"
