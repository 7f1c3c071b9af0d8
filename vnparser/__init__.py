"""
vnparser - Vertica native binary file reader

Vertica のネイティブバイナリ形式（EXPORT ... FORMAT NATIVE / COPY ... NATIVE）の
ファイルを検証・デコードし、行を型付きの値と正規テキストとして返す。
"""

from .binary_decoder import VerticaNativeFile, open_native_file, read_rows
from .config import RenderOptions
from .errors import (
    ConfigError,
    DecodeError,
    FramingError,
    HeaderError,
    SchemaMismatchError,
    VerticaNativeError,
)
from .meta_fetch import bind_column_widths, has_names, load_column_meta, parse_column_meta
from .row import Cell, Row
from .types import ColumnMeta

__version__ = "0.1.0"

__all__ = [
    # メイン処理
    "open_native_file",
    "read_rows",
    "VerticaNativeFile",
    # 型定義
    "load_column_meta",
    "parse_column_meta",
    "bind_column_widths",
    "has_names",
    # 基盤
    "ColumnMeta",
    "Row",
    "Cell",
    "RenderOptions",
    # エラー
    "VerticaNativeError",
    "ConfigError",
    "HeaderError",
    "SchemaMismatchError",
    "FramingError",
    "DecodeError",
]
