"""
Vertica ネイティブファイル → Row の遅延シーケンス

使い方例:
    from vnparser import load_column_meta, open_native_file

    schema = load_column_meta("types.txt")
    with open_native_file("data.bin", schema, limit=100) as f:
        for row in f:
            print(row.render())

ヘッダー（シグネチャ・バージョン・列幅）は open 時に検証し、行は
反復時に 1 行グループずつ読み込む。行数上限に達したら残りは読まない。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Sequence, Tuple, Union

from .errors import ConfigError
from .meta_fetch import bind_column_widths
from .native_header import NativeHeader, read_native_header
from .row import Row
from .row_decoder import RowDecoder
from .row_group_reader import iter_row_groups
from .types import ColumnMeta

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, BinaryIO]


class VerticaNativeFile:
    """
    ネイティブファイル 1 つ分のリーダー

    反復は 1 回限り（前方専用）。ファイルパスから開いた場合は、
    反復の終了・行数上限への到達・close() のいずれかでストリームを閉じる。
    """

    def __init__(
        self,
        stream: BinaryIO,
        schema: Sequence[ColumnMeta],
        limit: Optional[int] = None,
        close_source: bool = False,
        name: str = "<stream>",
    ):
        if limit is not None and limit < 0:
            raise ConfigError(f"row limit must be non-negative, got {limit}")

        self.name = name
        self.limit = limit
        self._stream: Optional[BinaryIO] = stream
        self._close_source = close_source
        self._started = False
        self.rows_read = 0

        try:
            self.header: NativeHeader = read_native_header(stream)
            self.schema: Tuple[ColumnMeta, ...] = bind_column_widths(schema, self.header.column_widths)
        except BaseException:
            self.close()
            raise

        self._decoder = RowDecoder(self.schema)
        logger.debug("%s: %d columns bound, limit=%s", name, len(self.schema), limit)

    @property
    def closed(self) -> bool:
        return self._stream is None

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None and self._close_source:
            stream.close()

    def __enter__(self) -> "VerticaNativeFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Row]:
        if self._started:
            raise RuntimeError(f"{self.name} can only be iterated once")
        self._started = True
        return self._rows()

    def _rows(self) -> Iterator[Row]:
        try:
            if self._stream is None or self.limit == 0:
                return
            offset = self.header.size
            for payload in iter_row_groups(self._stream, offset):
                for row in self._decoder.decode(payload, self.rows_read, offset + 4):
                    self.rows_read += 1
                    if self.limit is not None and self.rows_read >= self.limit:
                        # 最後の行はデコード済みなので先にストリームを閉じる
                        logger.debug("%s: row limit %d reached", self.name, self.limit)
                        self.close()
                        yield row
                        return
                    yield row
                offset += 4 + len(payload)
        finally:
            self.close()


def open_native_file(
    source: Source,
    schema: Sequence[ColumnMeta],
    limit: Optional[int] = None,
    close_source: bool = False,
) -> VerticaNativeFile:
    """
    ネイティブファイルを開いてヘッダーを検証する

    Args:
        source: ファイルパス、またはバイナリモードのファイルオブジェクト
        schema: 型定義（load_column_meta / parse_column_meta の結果）
        limit: 返す最大行数（None は無制限）
        close_source: 反復終了時にストリームを閉じるか。
            パスから開いた場合は常に閉じる

    Raises:
        HeaderError: シグネチャ・バージョン・ヘッダーが不正
        SchemaMismatchError: 型定義とヘッダーの列数・列幅が一致しない
    """
    if isinstance(source, (str, os.PathLike)):
        stream = open(source, "rb")
        name = str(Path(source))
        owns = True
    else:
        stream = source
        name = getattr(source, "name", "<stream>")
        if not isinstance(name, str):
            name = "<stream>"
        owns = bool(close_source)

    return VerticaNativeFile(stream, schema, limit=limit, close_source=owns, name=name)


def read_rows(source: Source, schema: Sequence[ColumnMeta], limit: Optional[int] = None) -> Iterator[Row]:
    """open_native_file の簡易版（with 不要の生成器）"""
    with open_native_file(source, schema, limit=limit) as f:
        yield from f


__all__ = ["VerticaNativeFile", "open_native_file", "read_rows"]
