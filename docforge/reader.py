"""Byte-order-mark aware decoding of template sources."""

from __future__ import annotations

from pathlib import Path


def decode_bytes(data: bytes) -> str:
    """Decode ``data`` honouring a leading UTF-16 or UTF-8 byte-order mark.

    The marker itself is never part of the returned text. Input without a
    marker is treated as UTF-8. A dangling odd byte at the end of UTF-16 input
    is dropped and undecodable sequences become U+FFFD.
    """
    if data[:2] == b"\xfe\xff":
        return _decode_utf16(data[2:], "utf-16-be")
    if data[:2] == b"\xff\xfe":
        return _decode_utf16(data[2:], "utf-16-le")
    if data[:2] == b"\xef\xbb":
        return data[3:].decode("utf-8", errors="replace")
    return data.decode("utf-8", errors="replace")


def read_file(path: Path | str) -> str:
    """Read a text file written in any of the encodings ``decode_bytes`` knows."""
    return decode_bytes(Path(path).read_bytes())


def _decode_utf16(payload: bytes, encoding: str) -> str:
    even = len(payload) - (len(payload) % 2)
    return payload[:even].decode(encoding, errors="replace")
