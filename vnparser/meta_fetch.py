"""
型定義ファイル → ColumnMeta 変換

型定義ファイルは 1 行 1 列で、書式は ``type[/name[/conversion]]``。

    Integer/IntCol
    Varchar(20)/Name
    Numeric(10,2)/Price
    Varbinary/Mac/mac-address

使い方例:
    from vnparser.meta_fetch import load_column_meta

    metas = load_column_meta("types.txt")
    for m in metas:
        print(m)
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .errors import ConfigError, SchemaMismatchError
from .types import (
    ColumnMeta, VN_TYPE_BY_NAME, VN_TYPE_WIDTHS, CONVERSION_BY_NAME,
    CHAR, VARCHAR, BINARY, VARBINARY, NUMERIC, VARIABLE_WIDTH,
)

logger = logging.getLogger(__name__)

_TYPE_RE = re.compile(r"^([A-Za-z]+)\s*(?:\(\s*([^()]*?)\s*\))?$")

# Vertica NUMERIC の最大精度
MAX_NUMERIC_PRECISION = 1024

# 長さパラメータを受け付ける型
_LENGTH_TYPES = (CHAR, VARCHAR, BINARY, VARBINARY)


def numeric_width(precision: int) -> int:
    """NUMERIC(p) のネイティブファイル上のバイト長（64bit ワード単位）"""
    return (precision // 19 + 1) * 8


def _parse_params(raw: str, line_no: int) -> List[int]:
    try:
        return [int(p.strip()) for p in raw.split(",")]
    except ValueError:
        raise ConfigError(f"invalid type parameters: ({raw})", line_no) from None


def _parse_type(field: str, line_no: int) -> Tuple[int, Optional[int], int, Optional[int]]:
    """型フィールドから (vn_type, precision, scale, declared_length) を返す"""
    m = _TYPE_RE.match(field)
    if m is None:
        raise ConfigError(f"invalid type: {field}", line_no)

    vn_type = VN_TYPE_BY_NAME.get(m.group(1).lower())
    if vn_type is None:
        raise ConfigError(f"invalid type: {field}", line_no)

    precision: Optional[int] = None
    scale = 0
    declared_length: Optional[int] = None
    raw_params = m.group(2)

    if raw_params is None or raw_params == "":
        return vn_type, precision, scale, declared_length

    params = _parse_params(raw_params, line_no)

    if vn_type == NUMERIC:
        if len(params) > 2:
            raise ConfigError(f"numeric takes (precision[, scale]): {field}", line_no)
        precision = params[0]
        scale = params[1] if len(params) == 2 else 0
        if not 1 <= precision <= MAX_NUMERIC_PRECISION:
            raise ConfigError(f"numeric precision out of range: {precision}", line_no)
        if not 0 <= scale <= precision:
            raise ConfigError(f"numeric scale out of range: {scale}", line_no)
    elif vn_type in _LENGTH_TYPES:
        if len(params) != 1 or params[0] <= 0:
            raise ConfigError(f"invalid length for {m.group(1)}: ({raw_params})", line_no)
        declared_length = params[0]
    else:
        # Vertica の DDL 由来の修飾子（timestamp(6) など）は無視する
        logger.debug("line %d: ignoring type parameters (%s)", line_no, raw_params)

    return vn_type, precision, scale, declared_length


def _parse_conversion(field: str, line_no: int) -> int:
    key = field.lower().replace("-", "").replace("_", "")
    conversion = CONVERSION_BY_NAME.get(key)
    if conversion is None:
        raise ConfigError(f"invalid conversion: {field}", line_no)
    return conversion


def parse_column_meta(lines: Iterable[str]) -> List[ColumnMeta]:
    """型定義の各行を ColumnMeta のリストに変換（空行は無視）"""
    metas: List[ColumnMeta] = []

    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue

        chunks = [c.strip() for c in line.split("/")]
        if len(chunks) > 3:
            raise ConfigError(f"too many fields: {line}", line_no)

        vn_type, precision, scale, declared_length = _parse_type(chunks[0], line_no)
        name = chunks[1] if len(chunks) > 1 else ""

        conversion: Optional[int] = None
        if len(chunks) > 2 and chunks[2]:
            if not name:
                raise ConfigError("conversion requires a column name", line_no)
            if vn_type not in (VARBINARY, BINARY):
                raise ConfigError(
                    f"conversion is only valid for Varbinary/Binary columns: {line}", line_no
                )
            conversion = _parse_conversion(chunks[2], line_no)

        metas.append(
            ColumnMeta(
                index=len(metas),
                vn_type=vn_type,
                name=name,
                conversion=conversion,
                precision=precision,
                scale=scale,
                declared_length=declared_length,
            )
        )

    return metas


def load_column_meta(path: Union[str, Path]) -> List[ColumnMeta]:
    """型定義ファイルを読み込んで ColumnMeta のリストを返す"""
    with open(path, "r", encoding="utf-8") as f:
        metas = parse_column_meta(f)
    if not metas:
        raise ConfigError(f"no column types found in {path}")
    logger.debug("loaded %d column types from %s", len(metas), path)
    return metas


def has_names(metas: Sequence[ColumnMeta]) -> bool:
    """全列に名前が付いているか"""
    return bool(metas) and all(m.name for m in metas)


def _bound_size(meta: ColumnMeta, width: int) -> int:
    """ヘッダーの列幅を検証し、ColumnMeta.elem_size に入れる値を返す"""
    allowed = VN_TYPE_WIDTHS[meta.vn_type]
    label = f"column {meta.index} ({meta.type_name})"

    if width == VARIABLE_WIDTH:
        # Char/Binary は長さ付きで書かれていても読める
        if allowed is None or meta.vn_type in (CHAR, BINARY):
            return 0
        raise SchemaMismatchError(f"{label} is fixed width but the file declares it variable")

    if allowed is None:
        raise SchemaMismatchError(f"{label} is variable width but the file declares {width} bytes")
    if width == 0:
        raise SchemaMismatchError(f"{label} has zero width in the file header")
    if allowed and width not in allowed:
        raise SchemaMismatchError(f"{label} cannot be {width} bytes wide")

    if meta.vn_type == NUMERIC:
        if meta.precision is not None:
            expected = numeric_width(meta.precision)
            if width != expected:
                raise SchemaMismatchError(
                    f"{label} numeric({meta.precision},{meta.scale}) needs {expected} bytes, "
                    f"file declares {width}"
                )
        elif width % 8 != 0:
            raise SchemaMismatchError(f"{label} numeric width {width} is not a multiple of 8")
    elif meta.declared_length is not None and width != meta.declared_length:
        raise SchemaMismatchError(
            f"{label} declared length {meta.declared_length}, file declares {width}"
        )

    return width


def bind_column_widths(metas: Sequence[ColumnMeta], widths: Sequence[int]) -> Tuple[ColumnMeta, ...]:
    """型定義をファイルヘッダーの列幅に束縛した不変タプルを返す"""
    if len(metas) != len(widths):
        raise SchemaMismatchError(
            f"types file lists {len(metas)} columns, file header declares {len(widths)}"
        )
    return tuple(replace(m, elem_size=_bound_size(m, w)) for m, w in zip(metas, widths))


__all__ = [
    "numeric_width",
    "parse_column_meta",
    "load_column_meta",
    "has_names",
    "bind_column_widths",
    "MAX_NUMERIC_PRECISION",
]
