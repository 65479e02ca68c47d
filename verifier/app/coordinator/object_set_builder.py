"""
Object set construction.

Materializes the "available" object set from fetched payload sources:

    decompress -> split -> decode -> key by identity

The build is all-or-nothing. Any failure aborts it and no partial set is
returned.
"""

from __future__ import annotations

import logging
from typing import Iterable

from verifier.app.config import VerifierConfig
from verifier.app.decoding.compression import decompress
from verifier.app.decoding.decoder import ObjectDecoder
from verifier.app.decoding.documents import split_documents
from verifier.app.errors import DecodeError
from verifier.app.schemas.declaration import PayloadSource
from verifier.app.schemas.objects import ObjectSet

logger = logging.getLogger(__name__)


def extract_objects(
    source: PayloadSource,
    decoder: ObjectDecoder,
    objects: ObjectSet,
    *,
    config: VerifierConfig,
) -> int:
    """
    Decode every document of one payload source into `objects`.

    Returns the number of documents decoded. On identity collision the
    later document replaces the earlier one, unless strict collisions
    are configured.
    """
    data = decompress(
        source.key,
        source.raw,
        suffix=config.COMPRESSION_SUFFIX,
        max_size=config.max_decompressed_bytes,
    )

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"payload is not valid UTF-8: {exc}",
            source=source.key,
        ) from exc

    count = 0
    for index, document in enumerate(
        split_documents(text, config.DOCUMENT_SEPARATOR)
    ):
        try:
            obj = decoder.decode(document)
            identity = decoder.identity(obj)
        except DecodeError as exc:
            raise exc.with_context(
                source=source.key,
                document_index=index,
            ) from exc

        if identity in objects:
            if config.STRICT_IDENTITY_COLLISIONS:
                raise DecodeError(
                    f"duplicate object identity {identity}",
                    source=source.key,
                    document_index=index,
                )
            logger.warning(
                "object identity %s declared more than once; "
                "keeping the one from %s document #%d",
                identity,
                source.key,
                index,
            )

        objects[identity] = obj
        count += 1

    return count


def build_object_set(
    sources: Iterable[PayloadSource],
    decoder: ObjectDecoder,
    *,
    config: VerifierConfig,
) -> ObjectSet:
    """
    Build one object set from all payload sources of a declaration.
    """
    objects: ObjectSet = {}

    for source in sources:
        count = extract_objects(source, decoder, objects, config=config)
        logger.debug(
            "decoded %d document(s) from payload source %s",
            count,
            source.key,
        )

    return objects
