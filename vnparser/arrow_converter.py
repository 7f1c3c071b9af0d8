"""
Vertica 型 → Arrow 型マッピングと Parquet 書き出し

Arrow に対応する型がないもの（TimeTz、変換ヒント付きのバイト列、
精度が 76 桁を超えるか未宣言の Numeric）は正規テキストの string 列にする。
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from .codecs.data_decoder import render_value
from .config import DEFAULT_RENDER_OPTIONS, RenderOptions, parquet_row_group_size
from .row import Row
from .types import (
    ColumnMeta,
    INTEGER, FLOAT, CHAR, VARCHAR, BOOLEAN, DATE, TIMESTAMP, TIMESTAMPTZ,
    TIME, TIMETZ, VARBINARY, BINARY, NUMERIC, INTERVAL,
)

logger = logging.getLogger(__name__)

# Integer の列幅 → Arrow 整数型
_INT_BY_WIDTH = {1: pa.int8(), 2: pa.int16(), 4: pa.int32(), 8: pa.int64()}

# 幅・精度に依存しない型
VN_TYPE_TO_ARROW: Dict[int, pa.DataType] = {
    FLOAT: pa.float64(),
    CHAR: pa.string(),
    VARCHAR: pa.string(),
    BOOLEAN: pa.bool_(),
    DATE: pa.date32(),
    TIMESTAMP: pa.timestamp("us"),
    TIMESTAMPTZ: pa.timestamp("us", tz="UTC"),
    TIME: pa.time64("us"),
    TIMETZ: pa.string(),
    VARBINARY: pa.binary(),
    BINARY: pa.binary(),
    INTERVAL: pa.duration("us"),
}

_DECIMAL128_MAX_PRECISION = 38
_DECIMAL256_MAX_PRECISION = 76


def arrow_type(meta: ColumnMeta) -> pa.DataType:
    """ColumnMeta から Arrow 型を返す"""
    if meta.vn_type == INTEGER:
        return _INT_BY_WIDTH.get(meta.elem_size, pa.int64())
    if meta.vn_type == NUMERIC:
        p = meta.precision
        if p is None or p > _DECIMAL256_MAX_PRECISION:
            return pa.string()
        if p <= _DECIMAL128_MAX_PRECISION:
            return pa.decimal128(p, meta.scale)
        return pa.decimal256(p, meta.scale)
    if meta.vn_type in (VARBINARY, BINARY) and meta.conversion is not None:
        return pa.string()
    return VN_TYPE_TO_ARROW[meta.vn_type]


def column_name(meta: ColumnMeta) -> str:
    return meta.name or f"col{meta.index}"


def build_arrow_schema(schema: Sequence[ColumnMeta]) -> pa.Schema:
    return pa.schema([pa.field(column_name(m), arrow_type(m), nullable=True) for m in schema])


def _value_converter(meta: ColumnMeta, pa_type: pa.DataType, options: RenderOptions) -> Callable[[Any], Any]:
    """デコード済みの値を pa.array に渡せる Python 値に変換する関数"""
    if pa.types.is_string(pa_type) and meta.vn_type not in (CHAR, VARCHAR):
        return lambda v: render_value(v, meta, options) if v is not None else None
    if pa.types.is_decimal(pa_type):
        return lambda v: v.to_decimal() if v is not None else None
    return lambda v: v


class ParquetWriter:
    """
    Row を Arrow RecordBatch にまとめて Parquet ファイルへ書き込む

    batch_size 行ごとに 1 バッチ（Parquet の行グループ）を書き出すので、
    保持するのは最大 batch_size 行分の値のみ。
    """

    def __init__(
        self,
        output_path: str,
        schema: Sequence[ColumnMeta],
        compression: str = "snappy",
        batch_size: Optional[int] = None,
        options: Optional[RenderOptions] = None,
    ):
        self.output_path = output_path
        self.columns = tuple(schema)
        self.batch_size = batch_size or parquet_row_group_size()
        self.arrow_schema = build_arrow_schema(self.columns)
        options = options or DEFAULT_RENDER_OPTIONS
        self._converters = [
            _value_converter(m, f.type, options) for m, f in zip(self.columns, self.arrow_schema)
        ]
        self._buffers: List[List[Any]] = [[] for _ in self.columns]
        self.writer = pq.ParquetWriter(output_path, self.arrow_schema, compression=compression)
        self.records_written = 0

    def _flush(self):
        if not self._buffers or not self._buffers[0]:
            return
        arrays = [
            pa.array(values, type=field.type)
            for values, field in zip(self._buffers, self.arrow_schema)
        ]
        batch = pa.RecordBatch.from_arrays(arrays, schema=self.arrow_schema)
        self.writer.write_batch(batch)
        self.records_written += batch.num_rows
        logger.debug("wrote parquet batch of %d rows to %s", batch.num_rows, self.output_path)
        self._buffers = [[] for _ in self.columns]

    def write_row(self, row: Row):
        for buf, convert, value in zip(self._buffers, self._converters, row.values):
            buf.append(convert(value))
        if len(self._buffers[0]) >= self.batch_size:
            self._flush()

    def write_rows(self, rows: Iterable[Row]) -> int:
        """全行を書き込み、書き込んだ行数を返す"""
        count = 0
        for row in rows:
            self.write_row(row)
            count += 1
        self._flush()
        return count

    def close(self):
        """ライターを閉じる"""
        self._flush()
        self.writer.close()
        logger.info("Parquet file written: %s (%d rows)", self.output_path, self.records_written)

    def __enter__(self) -> "ParquetWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def write_parquet(
    rows: Iterable[Row],
    output_path: str,
    schema: Sequence[ColumnMeta],
    options: Optional[RenderOptions] = None,
    compression: str = "snappy",
    batch_size: Optional[int] = None,
) -> int:
    """Row 列を Parquet ファイルに書き込み、行数を返す"""
    with ParquetWriter(output_path, schema, compression=compression,
                       batch_size=batch_size, options=options) as writer:
        return writer.write_rows(rows)


__all__ = [
    "VN_TYPE_TO_ARROW",
    "arrow_type",
    "build_arrow_schema",
    "ParquetWriter",
    "write_parquet",
]
