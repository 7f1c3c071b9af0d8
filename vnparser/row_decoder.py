"""
行グループのペイロード → Row 列

ペイロードは 1 行以上の行の連結:

    null ビットマップ  ceil(N/8) バイト（ビットが立っている列は NULL）
                       バイト内は MSB 先頭（列 0 = 先頭バイトの 0x80）
    列データ           NULL でない列だけがスキーマ順に並ぶ
                       固定長列は elem_size バイト、
                       可変長列は u32 LE 長さ + その長さのバイト列

カーソルがペイロード長にちょうど一致するまで行を読み続ける。
"""

from __future__ import annotations

import logging
import struct
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from .codecs.data_decoder import Codec, codec_for
from .errors import DecodeError, FramingError
from .row import Row
from .types import ColumnMeta

logger = logging.getLogger(__name__)

_LENGTH = struct.Struct("<I")


def null_bitmap_size(column_count: int) -> int:
    return (column_count + 7) // 8


def unpack_null_bitmap(payload: bytes, offset: int, column_count: int) -> np.ndarray:
    """ビットマップを列ごとの bool 配列（True = NULL）に展開"""
    raw = np.frombuffer(payload, dtype=np.uint8, count=null_bitmap_size(column_count), offset=offset)
    return np.unpackbits(raw)[:column_count].astype(bool)


def pack_null_bitmap(nulls: Sequence[bool]) -> bytes:
    """列ごとの NULL フラグをビットマップに変換（テスト・ファイル生成用）"""
    if len(nulls) == 0:
        return b""
    return np.packbits(np.asarray(nulls, dtype=np.uint8)).tobytes()


class RowDecoder:
    """スキーマに束縛された行デコーダ（コーデック表はここで一度だけ解決）"""

    def __init__(self, schema: Sequence[ColumnMeta]):
        self.schema: Tuple[ColumnMeta, ...] = tuple(schema)
        self.codecs: Tuple[Codec, ...] = tuple(codec_for(m) for m in self.schema)
        self.bitmap_size = null_bitmap_size(len(self.schema))

    def decode(self, payload: bytes, first_ordinal: int = 0, base_offset: int = 0) -> Iterator[Row]:
        """
        ペイロード内の行を順に返す

        Args:
            payload: 長さプレフィックスを除いた行グループの中身
            first_ordinal: 先頭行の行番号（ファイル先頭からの 0 始まり）
            base_offset: ペイロード先頭のファイル内オフセット（エラー表示用）

        Raises:
            FramingError: 列データがペイロード末尾を越える
            DecodeError: 値のバイト列が型として不正
        """
        size = len(payload)
        column_count = len(self.schema)
        cursor = 0
        ordinal = first_ordinal

        if column_count == 0 and size:
            raise FramingError(
                f"{size} payload bytes for a file with no columns", row=ordinal, offset=base_offset
            )

        while cursor < size:
            if cursor + self.bitmap_size > size:
                raise FramingError(
                    "row group ends inside a null bitmap",
                    row=ordinal, offset=base_offset + cursor,
                )
            nulls = unpack_null_bitmap(payload, cursor, column_count)
            cursor += self.bitmap_size

            values: List = []
            for meta, codec, is_null in zip(self.schema, self.codecs, nulls):
                if is_null:
                    values.append(None)
                    continue

                start = cursor
                if meta.is_variable:
                    if cursor + _LENGTH.size > size:
                        raise FramingError(
                            "row group ends inside a value length prefix",
                            column=meta.index, row=ordinal, offset=base_offset + cursor,
                        )
                    (length,) = _LENGTH.unpack_from(payload, cursor)
                    cursor += _LENGTH.size
                else:
                    length = meta.elem_size

                if cursor + length > size:
                    raise FramingError(
                        f"value of {length} bytes runs past the end of the row group",
                        column=meta.index, row=ordinal, offset=base_offset + start,
                    )

                raw = payload[cursor:cursor + length]
                try:
                    values.append(codec.decode(raw, meta))
                except DecodeError as e:
                    raise DecodeError(
                        str(e), column=meta.index, row=ordinal, offset=base_offset + cursor
                    ) from e
                cursor += length

            yield Row(ordinal=ordinal, values=tuple(values), columns=self.schema)
            ordinal += 1


__all__ = ["RowDecoder", "null_bitmap_size", "unpack_null_bitmap", "pack_null_bitmap"]
