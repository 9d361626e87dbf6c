"""Content sniffing: derive a blob's MIME type from its leading bytes.

Only the payload is trusted. Declared ``Content-Type`` headers and file
names are never consulted.
"""
from typing import Final

PNG: Final = 'image/png'
JPEG: Final = 'image/jpeg'
GIF: Final = 'image/gif'
OCTET_STREAM: Final = 'application/octet-stream'

# first match wins
DEFAULT_SIGNATURES: Final[tuple[tuple[bytes, str], ...]] = (
    (b'\x89PNG', PNG),
    (b'\xff\xd8', JPEG),
    (b'GIF', GIF),
)

MIN_SNIFF_LENGTH: Final = 4

KNOWN_MIME_TYPES: Final = frozenset({PNG, JPEG, GIF, OCTET_STREAM})


def sniff_mime(
    data: bytes | bytearray | memoryview,
    signatures: tuple[tuple[bytes, str], ...] = DEFAULT_SIGNATURES,
    *,
    min_length: int = MIN_SNIFF_LENGTH,
    fallback: str = OCTET_STREAM,
) -> str:
    """Return the MIME type matching the first signature that prefixes ``data``.

    Buffers shorter than ``min_length`` are never classified, even when a
    shorter signature (JPEG's two bytes) would match.
    """
    if len(data) < min_length:
        return fallback
    width = max([min_length, *(len(prefix) for prefix, _ in signatures)])
    head = bytes(data[:width])
    for prefix, mime in signatures:
        if head.startswith(prefix):
            return mime
    return fallback
