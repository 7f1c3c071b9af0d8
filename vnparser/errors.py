"""ネイティブファイル読み込み関連のエラー"""

from __future__ import annotations
from typing import Optional


class VerticaNativeError(Exception):
    """vnparser が送出するエラーの基底クラス"""
    pass


class ConfigError(VerticaNativeError):
    """型定義ファイルの書式エラー（ロード時に致命的）"""

    def __init__(self, message: str, line_no: Optional[int] = None):
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no


class HeaderError(VerticaNativeError):
    """ファイルシグネチャ・バージョン・列定義ヘッダーの不正"""
    pass


class SchemaMismatchError(VerticaNativeError):
    """型定義とファイルヘッダーの列数・列幅が一致しない"""
    pass


class _PositionedError(VerticaNativeError):
    """列番号・行番号・バイトオフセットを保持するエラー"""

    def __init__(
        self,
        message: str,
        column: Optional[int] = None,
        row: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        where = []
        if row is not None:
            where.append(f"row {row}")
        if column is not None:
            where.append(f"column {column}")
        if offset is not None:
            where.append(f"offset {offset}")
        if where:
            message = f"{message} ({', '.join(where)})"
        super().__init__(message)
        self.column = column
        self.row = row
        self.offset = offset


class FramingError(_PositionedError):
    """行グループ長の不一致、またはストリームの途中終端"""
    pass


class DecodeError(_PositionedError):
    """特定の列・行の値バイトが不正"""
    pass


__all__ = [
    "VerticaNativeError",
    "ConfigError",
    "HeaderError",
    "SchemaMismatchError",
    "FramingError",
    "DecodeError",
]
