"""
termbook Codec

Table <-> bytes for the persisted dictionary file.

Format: gzip stream of a canonical JSON object (RFC 8785 subset via the
canonicaljson library: sorted keys, minimal whitespace, UTF-8), mapping
lowercase term -> definition. No envelope, no version field.

Encoding is canonical so that the same table always produces the same
decompressed bytes; decoding goes through orjson.
"""

import gzip
import zlib
from typing import Dict, Mapping

import canonicaljson
import orjson

from .errors import DecodeError, EncodeError


def encode(table: Mapping[str, str]) -> bytes:
    """
    Serialize a table to compressed bytes.

    Args:
        table: term -> definition mapping (keys already normalized)

    Returns:
        gzip-compressed canonical JSON

    Raises:
        EncodeError: a term or definition is not encodable (lone surrogates, non-strings)
    """
    try:
        payload = canonicaljson.encode_canonical_json(dict(table))
    except (UnicodeEncodeError, TypeError) as e:
        raise EncodeError(f"Cannot encode dictionary: {e}") from e
    # mtime=0 keeps the gzip header stable for identical tables
    return gzip.compress(payload, mtime=0)


def decode(data: bytes) -> Dict[str, str]:
    """
    Parse compressed bytes back into a table.

    Raises:
        DecodeError: data is not gzip, not JSON, or not an object of strings
    """
    try:
        payload = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise DecodeError(f"Cannot decompress dictionary data: {e}") from e

    try:
        obj = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise DecodeError(f"Malformed dictionary JSON: {e}") from e

    if not isinstance(obj, dict):
        raise DecodeError(f"Dictionary data must be a JSON object, got {type(obj).__name__}")

    for term, definition in obj.items():
        if not isinstance(definition, str):
            raise DecodeError(f"Definition of {term!r} is not a string")

    return obj
