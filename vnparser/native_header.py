"""
ネイティブファイルのシグネチャと列定義ヘッダーの解析

    シグネチャ     11 バイト  4E 41 54 49 56 45 0A FF 0D 0A 00 ("NATIVE\\n\\377\\r\\n\\0")
    ヘッダー長     u32 LE    この 4 バイトを除く列定義ヘッダーのバイト数
    バージョン     u16 LE    1 のみ対応
    フィラー       u8
    列数           u16 LE
    列幅           u32 LE × 列数（0xFFFFFFFF は可変長）

ヘッダー長が列数から計算される長さより大きい場合、余りのバイトは読み飛ばす。
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Tuple

from .errors import HeaderError

logger = logging.getLogger(__name__)

NATIVE_SIGNATURE = b"NATIVE\n\377\r\n\0"
SIGNATURE_SIZE = len(NATIVE_SIGNATURE)
SUPPORTED_VERSION = 1

# バージョン(2) + フィラー(1) + 列数(2)
_FIXED_PART = struct.Struct("<HBH")


@dataclass(frozen=True)
class NativeHeader:
    """列定義ヘッダーの内容"""
    header_length: int
    version: int
    column_widths: Tuple[int, ...]

    @property
    def column_count(self) -> int:
        return len(self.column_widths)

    @property
    def size(self) -> int:
        """シグネチャを含むヘッダー全体のバイト数（最初の行グループの開始位置）"""
        return SIGNATURE_SIZE + 4 + self.header_length


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if not data else len(data)
        raise HeaderError(f"file ends inside the {what} ({got} of {size} bytes)")
    return data


def read_signature(stream: BinaryIO) -> None:
    sig = _read_exact(stream, SIGNATURE_SIZE, "file signature")
    if sig != NATIVE_SIGNATURE:
        raise HeaderError(f"not a Vertica native file: bad signature {sig.hex().upper()}")


def read_column_definitions(stream: BinaryIO) -> NativeHeader:
    """シグネチャ直後から列定義ヘッダーを読み込む"""
    (header_length,) = struct.unpack("<I", _read_exact(stream, 4, "header length"))
    if header_length < _FIXED_PART.size:
        raise HeaderError(f"column definition header is too short: {header_length} bytes")

    version, _filler, column_count = _FIXED_PART.unpack(
        _read_exact(stream, _FIXED_PART.size, "column definition header")
    )
    if version != SUPPORTED_VERSION:
        raise HeaderError(f"unsupported native file version {version}")

    needed = _FIXED_PART.size + 4 * column_count
    if header_length < needed:
        raise HeaderError(
            f"header length {header_length} cannot hold {column_count} column widths"
        )

    raw_widths = _read_exact(stream, 4 * column_count, "column widths")
    widths = struct.unpack(f"<{column_count}I", raw_widths)

    extra = header_length - needed
    if extra:
        logger.debug("skipping %d extra header bytes", extra)
        _read_exact(stream, extra, "column definition header")

    return NativeHeader(header_length=header_length, version=version, column_widths=tuple(widths))


def read_native_header(stream: BinaryIO) -> NativeHeader:
    """シグネチャと列定義ヘッダーを読み、ストリームを最初の行グループの先頭に置く"""
    read_signature(stream)
    header = read_column_definitions(stream)
    logger.debug(
        "native header: version=%d columns=%d widths=%s",
        header.version, header.column_count, list(header.column_widths),
    )
    return header


def build_native_header(column_widths) -> bytes:
    """列幅リストからシグネチャ付きヘッダーのバイト列を作成（テスト・ファイル生成用）"""
    widths = list(column_widths)
    body = _FIXED_PART.pack(SUPPORTED_VERSION, 0, len(widths))
    body += struct.pack(f"<{len(widths)}I", *widths)
    return NATIVE_SIGNATURE + struct.pack("<I", len(body)) + body


__all__ = [
    "NATIVE_SIGNATURE",
    "SUPPORTED_VERSION",
    "NativeHeader",
    "read_native_header",
    "build_native_header",
]
