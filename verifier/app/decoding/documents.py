"""
Multi-document splitting.
"""

from __future__ import annotations

from typing import Iterator

DOCUMENT_SEPARATOR = "---\n"


def split_documents(
    text: str,
    separator: str = DOCUMENT_SEPARATOR,
) -> Iterator[str]:
    """
    Yield the serialized documents of a payload, in order.

    Splits on the literal separator only; empty fragments (including the
    ones produced by a leading or trailing separator) are dropped.
    """
    for fragment in text.split(separator):
        if fragment == "":
            continue
        yield fragment
