import pytest

from apps.blobs.sniffer import sniff_mime, DEFAULT_SIGNATURES, KNOWN_MIME_TYPES


@pytest.mark.parametrize('data', [b'', b'\x89', b'\xff\xd8', b'GIF', b'\x00\x01'])
def test_short_buffers_are_octet_stream(data):
    assert sniff_mime(data) == 'application/octet-stream'


def test_png_signature():
    assert sniff_mime(b'\x89PNG\r\n\x1a\n') == 'image/png'
    assert sniff_mime(b'\x89PNG' + b'anything at all') == 'image/png'
    assert sniff_mime(b'\x89PNG') == 'image/png'


def test_jpeg_needs_only_two_signature_bytes():
    assert sniff_mime(b'\xff\xd8\x00\x00') == 'image/jpeg'
    assert sniff_mime(b'\xff\xd8\xff\xe0rest') == 'image/jpeg'


def test_jpeg_below_threshold_is_not_classified():
    assert sniff_mime(b'\xff\xd8\xff') == 'application/octet-stream'


def test_gif_signature():
    assert sniff_mime(b'GIF89a') == 'image/gif'
    assert sniff_mime(b'GIF87a') == 'image/gif'
    assert sniff_mime(b'GIFx') == 'image/gif'


def test_unknown_content_falls_back():
    assert sniff_mime(b'hello world') == 'application/octet-stream'
    assert sniff_mime(b'%PDF-1.7') == 'application/octet-stream'
    # partial PNG signature
    assert sniff_mime(b'\x89PNx') == 'application/octet-stream'


def test_declared_type_is_irrelevant():
    # a payload that "claims" to be an image in text is still unknown
    assert sniff_mime(b'Content-Type: image/png') == 'application/octet-stream'


def test_accepts_bytearray_and_memoryview():
    assert sniff_mime(bytearray(b'\x89PNG1234')) == 'image/png'
    assert sniff_mime(memoryview(b'GIF89a')) == 'image/gif'


def test_custom_signature_table_and_fallback():
    table = ((b'RIFF', 'image/webp'),) + DEFAULT_SIGNATURES
    assert sniff_mime(b'RIFF\x00\x00\x00\x00WEBP', table) == 'image/webp'
    assert sniff_mime(b'zzzz', table, fallback='application/x-unknown') == 'application/x-unknown'


def test_result_is_always_a_known_type():
    for data in (b'', b'\x89PNG', b'\xff\xd8ab', b'GIF8', b'\x00' * 32):
        assert sniff_mime(data) in KNOWN_MIME_TYPES
