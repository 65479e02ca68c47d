"""
Payload decompression.

Payload sources whose key ends with the compression suffix carry a
whole-blob brotli stream. Everything else is passed through unchanged.

Output is drained from the decoder in bounded steps, so the size limit is
enforced while inflating and a small stream cannot expand unchecked.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import brotli

from verifier.app.errors import DecodeError

logger = logging.getLogger(__name__)

BROTLI_COMPRESSION_SUFFIX = ".br"

# Upper bound on the bytes produced by a single decoder step.
OUTPUT_STEP_SIZE = 1024 * 1024


def decompress(
    key: str,
    raw: bytes,
    *,
    suffix: str = BROTLI_COMPRESSION_SUFFIX,
    max_size: Optional[int] = None,
) -> bytes:
    """
    Return the plain bytes of a payload source.

    Raises DecodeError when a compressed stream is corrupted (chained to
    the brotli error) or truncated, or as soon as the decoded output
    exceeds `max_size`.
    """
    if not key.endswith(suffix):
        return raw

    decompressor = brotli.Decompressor()
    chunks: List[bytes] = []
    size = 0
    pending = raw

    while True:
        try:
            chunk = decompressor.process(
                pending, output_buffer_limit=OUTPUT_STEP_SIZE
            )
        except brotli.error as exc:
            raise DecodeError(
                f"corrupted brotli stream: {exc}",
                source=key,
            ) from exc
        pending = b""

        size += len(chunk)
        if max_size is not None and size > max_size:
            raise DecodeError(
                f"decompressed payload exceeds the limit of {max_size} bytes",
                source=key,
            )
        chunks.append(chunk)

        # False while the decoder still holds output or unread input.
        if decompressor.can_accept_more_data():
            break

    if not decompressor.is_finished():
        raise DecodeError("truncated brotli stream", source=key)

    logger.debug("decompressed payload %s: %d -> %d bytes", key, len(raw), size)
    return b"".join(chunks)
