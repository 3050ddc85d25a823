"""Tests for dusted.webfile module."""

import hashlib
import io

import pytest

from dusted.fault import SystemFault
from dusted.webfile import detect_content_type, hash_file, mime_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class _BrokenFile(io.BytesIO):
    def read(self, *args):
        raise OSError("device not ready")


class TestDetectContentType:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (PNG, "image/png"),
            (b"\xff\xd8\xff\xe0" + b"\x00" * 16, "image/jpeg"),
            (b"GIF89a....", "image/gif"),
            (b"RIFF\x10\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"%PDF-1.7\n", "application/pdf"),
            (b"PK\x03\x04rest", "application/zip"),
            (b"\x1f\x8b\x08\x00", "application/x-gzip"),
            (b"  <!DOCTYPE html><html></html>", "text/html; charset=utf-8"),
            (b"<html>", "text/html; charset=utf-8"),
            (b"<?xml version='1.0'?><a/>", "text/xml; charset=utf-8"),
            (b"hello world\n", "text/plain; charset=utf-8"),
            (b"\x00\x01\x02\x03binary", "application/octet-stream"),
            (b"", "text/plain; charset=utf-8"),
        ],
    )
    def test_signatures(self, data, expected):
        assert detect_content_type(data) == expected

    def test_mp4(self):
        data = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
        assert detect_content_type(data) == "video/mp4"

    def test_html_tag_needs_terminator(self):
        """'<a' followed by a letter is not an HTML tag."""
        assert detect_content_type(b"<abc") == "text/plain; charset=utf-8"

    def test_only_first_512_bytes(self):
        data = b"a" * 512 + b"\x00"
        assert detect_content_type(data) == "text/plain; charset=utf-8"


class TestMimeType:
    def test_by_extension(self):
        """Known extensions win without reading the file."""
        f = io.BytesIO(b"not really a png")
        assert mime_type(f, "photo.png") == "image/png"
        assert f.tell() == 0

    def test_sniffs_unknown_extension(self):
        f = io.BytesIO(PNG)
        assert mime_type(f, "upload") == "image/png"

    def test_rewinds_after_sniffing(self):
        f = io.BytesIO(PNG)
        mime_type(f, "upload")
        assert f.tell() == 0
        assert f.read() == PNG

    def test_read_error_is_system_fault(self):
        with pytest.raises(SystemFault) as exc_info:
            mime_type(_BrokenFile(), "upload")
        assert exc_info.value.message == "webfile.mime_type: reading the first 512 bytes failed"
        assert isinstance(exc_info.value.cause(), OSError)


class TestHashFile:
    def test_sha256_hex(self):
        f = io.BytesIO(b"hello")
        assert hash_file(f) == hashlib.sha256(b"hello").hexdigest()

    def test_salt(self):
        f = io.BytesIO(b"hello")
        assert hash_file(f, salt=b"pepper") == hashlib.sha256(b"hellopepper").hexdigest()
        assert hash_file(f, salt=b"pepper") != hash_file(f)

    def test_rewinds(self):
        f = io.BytesIO(b"hello")
        first = hash_file(f)
        assert f.tell() == 0
        assert hash_file(f) == first

    def test_read_error_is_system_fault(self):
        with pytest.raises(SystemFault) as exc_info:
            hash_file(_BrokenFile())
        assert str(exc_info.value) == "webfile.hash_file: reading file failed\n   device not ready"
