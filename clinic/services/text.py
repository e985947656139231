import html
from typing import Optional

import bleach


def clean_text(value: Optional[str]) -> str:
    """Strip every HTML tag and return plain text.

    bleach escapes ``<`` and ``&`` in what it keeps; those are unescaped
    again so clinical shorthand such as ``BP < 90 & dizzy`` survives.
    Output is escaped by whoever renders it.
    """
    return html.unescape(bleach.clean((value or '').strip(), tags=set(), strip=True)).strip()
