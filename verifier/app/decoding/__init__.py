from .compression import BROTLI_COMPRESSION_SUFFIX, decompress
from .decoder import ObjectDecoder
from .documents import DOCUMENT_SEPARATOR, split_documents
from .registry import KindEntry, TypeRegistry, default_registry, kind_version

__all__ = [
    "BROTLI_COMPRESSION_SUFFIX",
    "DOCUMENT_SEPARATOR",
    "KindEntry",
    "ObjectDecoder",
    "TypeRegistry",
    "decompress",
    "default_registry",
    "kind_version",
    "split_documents",
]
