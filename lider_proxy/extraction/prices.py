# lider_proxy/extraction/prices.py

"""Price-string normalisation for Chilean-formatted prices."""

import math
import re

_NUMBER_RE = re.compile(r"\d[\d.,]*")
_THOUSANDS_ONLY_RE = re.compile(r"^\d{1,3}(?:\.\d{3})+$")


def parse_locale_price(text: str | None) -> float:
    """Convert a price such as ``'$1.234,56'`` to ``1234.56``.

    ``.`` is the thousands separator and ``,`` the decimal separator.
    A lone ``.`` is read as a decimal point unless it groups digits in
    threes (``'1.990'`` is 1990, ``'12.5'`` is 12.5). Returns ``0.0``
    when no finite number is present.
    """
    if not text:
        return 0.0
    match = _NUMBER_RE.search(text)
    if not match:
        return 0.0
    raw = match.group(0).rstrip(".,")

    if "," in raw:
        cleaned = raw.replace(".", "").replace(",", ".")
    elif _THOUSANDS_ONLY_RE.match(raw):
        cleaned = raw.replace(".", "")
    else:
        cleaned = raw

    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0
