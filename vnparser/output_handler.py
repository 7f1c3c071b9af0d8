"""
デコード結果の出力（CSV / JSON / JSON Lines、gzip 圧縮）

各 writer は Row の反復を消費しながら 1 行ずつ書き出し、書き込んだ行数を返す。
全行をメモリに溜めることはしない。
"""

from __future__ import annotations

import contextlib
import csv
import gzip
import io
import json
import logging
import math
import sys
from typing import Any, Iterable, Iterator, Optional, Sequence, TextIO

from .config import DEFAULT_RENDER_OPTIONS, RenderOptions
from .errors import ConfigError
from .meta_fetch import has_names
from .row import Row
from .types import ColumnMeta, INTEGER, FLOAT, BOOLEAN, NUMERIC

logger = logging.getLogger(__name__)

STDOUT = "-"


@contextlib.contextmanager
def open_text_output(path: str, compress: bool = False) -> Iterator[TextIO]:
    """
    出力先をテキストストリームとして開く

    path が "-" の場合は標準出力（閉じない）。compress=True なら gzip で包む。
    """
    if path == STDOUT:
        if compress:
            with gzip.GzipFile(fileobj=sys.stdout.buffer, mode="wb") as gz:
                with io.TextIOWrapper(gz, encoding="utf-8", newline="") as out:
                    yield out
        else:
            yield sys.stdout
            sys.stdout.flush()
        return

    if compress:
        with gzip.open(path, "wt", encoding="utf-8", newline="") as out:
            yield out
    else:
        with open(path, "w", encoding="utf-8", newline="") as out:
            yield out


def write_csv(
    rows: Iterable[Row],
    out: TextIO,
    schema: Sequence[ColumnMeta],
    options: Optional[RenderOptions] = None,
    delimiter: str = ",",
    quotechar: str = '"',
    header: bool = True,
) -> int:
    """
    区切り文字付きテキストとして書き出す

    列名が全列に付いていて header=True の場合のみヘッダー行を出力する。
    NULL は空フィールド。
    """
    options = options or DEFAULT_RENDER_OPTIONS
    writer = csv.writer(out, delimiter=delimiter, quotechar=quotechar, lineterminator="\n")

    if header and has_names(schema):
        writer.writerow([m.name for m in schema])

    count = 0
    for row in rows:
        writer.writerow(row.render(options))
        count += 1
    return count


def json_value(value: Any, meta: ColumnMeta, text: str) -> Any:
    """セル値 → JSON 値"""
    if value is None:
        return None
    if meta.vn_type == INTEGER:
        return value
    if meta.vn_type == FLOAT:
        return value if math.isfinite(value) else None
    if meta.vn_type == BOOLEAN:
        return value
    if meta.vn_type == NUMERIC and value.scale == 0:
        return value.unscaled
    return text


def _json_object(row: Row, options: RenderOptions) -> dict:
    return {cell.name: json_value(cell.value, row.columns[cell.index], cell.text)
            for cell in row.cells(options)}


def _require_names(schema: Sequence[ColumnMeta]):
    if not has_names(schema):
        raise ConfigError("JSON output requires a name for every column in the types file")


def write_json(
    rows: Iterable[Row],
    out: TextIO,
    schema: Sequence[ColumnMeta],
    options: Optional[RenderOptions] = None,
) -> int:
    """1 つの JSON 配列として書き出す（行ごとに逐次出力）"""
    _require_names(schema)
    options = options or DEFAULT_RENDER_OPTIONS

    count = 0
    out.write("[")
    for row in rows:
        out.write(",\n" if count else "\n")
        out.write(json.dumps(_json_object(row, options), ensure_ascii=False))
        count += 1
    out.write("\n]\n" if count else "]\n")
    return count


def write_json_lines(
    rows: Iterable[Row],
    out: TextIO,
    schema: Sequence[ColumnMeta],
    options: Optional[RenderOptions] = None,
) -> int:
    """1 行 1 オブジェクトの JSON Lines として書き出す"""
    _require_names(schema)
    options = options or DEFAULT_RENDER_OPTIONS

    count = 0
    for row in rows:
        out.write(json.dumps(_json_object(row, options), ensure_ascii=False))
        out.write("\n")
        count += 1
    return count


__all__ = [
    "STDOUT",
    "open_text_output",
    "write_csv",
    "write_json",
    "write_json_lines",
    "json_value",
]
