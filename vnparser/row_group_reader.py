"""
行グループのフレーミング読み込み

各行グループは u32 LE の長さプレフィックスと、その長さちょうどのペイロード。
ペイロードの中身（null ビットマップ・列データ）はここでは解釈しない。
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO, Iterator

from .errors import FramingError

logger = logging.getLogger(__name__)

_LENGTH = struct.Struct("<I")


def _read_up_to(stream: BinaryIO, size: int) -> bytes:
    """size バイトに届くか EOF になるまで読む（短い read を許容）"""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def iter_row_groups(stream: BinaryIO, start_offset: int = 0) -> Iterator[bytes]:
    """
    行グループのペイロードを 1 つずつ返す

    Args:
        stream: 最初の行グループの先頭に位置するバイナリストリーム
        start_offset: エラーメッセージ用のファイル先頭からのオフセット

    Raises:
        FramingError: 長さプレフィックスまたはペイロードの途中で EOF になった
    """
    offset = start_offset
    while True:
        prefix = _read_up_to(stream, _LENGTH.size)
        if not prefix:
            return
        if len(prefix) != _LENGTH.size:
            raise FramingError(
                f"file ends inside a row group length prefix ({len(prefix)} of 4 bytes)",
                offset=offset,
            )

        (length,) = _LENGTH.unpack(prefix)
        payload = _read_up_to(stream, length)
        if len(payload) != length:
            raise FramingError(
                f"row group declares {length} bytes but only {len(payload)} remain",
                offset=offset,
            )

        logger.debug("row group at offset %d: %d bytes", offset, length)
        yield payload
        offset += _LENGTH.size + length


__all__ = ["iter_row_groups"]
