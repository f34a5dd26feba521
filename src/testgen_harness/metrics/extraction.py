"""
Numeric Extraction

The service reports its numbers inside free-form prose, so each field is read
with a regular expression rather than decoded. The rules differ per field:

- running coverage: last match, decimals allowed  (``\\d+(\\.\\d+)?``)
- summary fields:   first match, integers only    (``\\d+``)

"Coverage increased to 87.5%" therefore yields 87 from a summary field.
"""

import re

DECIMAL_RE = re.compile(r"\d+(?:\.\d+)?", re.ASCII)
INTEGER_RE = re.compile(r"\d+", re.ASCII)


def extract_last_decimal(text: str | None) -> float | None:
    """Return the last integer-or-decimal number in the text, or None."""
    if not text:
        return None
    matches = DECIMAL_RE.findall(text)
    if not matches:
        return None
    return float(matches[-1])


def extract_first_integer(text: str | None) -> float | None:
    """Return the first run of digits in the text, or None."""
    if not text:
        return None
    match = INTEGER_RE.search(text)
    if match is None:
        return None
    return float(match.group())
