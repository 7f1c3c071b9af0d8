"""Vertica ネイティブ型 ID と ColumnMeta 定義"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Dict

# Vertica 型 ID（内部列挙）
INTEGER, FLOAT = 0, 1
CHAR, VARCHAR = 2, 3
BOOLEAN = 4
DATE, TIMESTAMP, TIMESTAMPTZ = 5, 6, 7
TIME, TIMETZ = 8, 9
VARBINARY, BINARY = 10, 11
NUMERIC = 12
INTERVAL = 13

# 変換ヒント（Varbinary / Binary のみ）
CONV_IP_ADDRESS, CONV_MAC_ADDRESS = 1, 2

# ヘッダーの列幅フィールドで可変長を表す値
VARIABLE_WIDTH = 0xFFFFFFFF

@dataclass(frozen=True)
class ColumnMeta:
    """型定義ファイルの 1 行分とファイルヘッダーの列幅をまとめた不変データクラス"""
    index: int
    vn_type: int
    name: str = ""
    conversion: Optional[int] = None
    precision: Optional[int] = None
    scale: int = 0
    declared_length: Optional[int] = None
    elem_size: int = 0  # ヘッダーから束縛される（可変長は 0）

    @property
    def is_variable(self) -> bool:
        """可変長型かどうか"""
        return self.elem_size == 0

    @property
    def type_name(self) -> str:
        return VN_TYPE_NAMES[self.vn_type]

# 型定義ファイル上の名前 → 型 ID（小文字で比較）
VN_TYPE_BY_NAME: Dict[str, int] = {
    "integer": INTEGER,
    "int": INTEGER,
    "float": FLOAT,
    "char": CHAR,
    "varchar": VARCHAR,
    "boolean": BOOLEAN,
    "date": DATE,
    "timestamp": TIMESTAMP,
    "timestamptz": TIMESTAMPTZ,
    "time": TIME,
    "timetz": TIMETZ,
    "varbinary": VARBINARY,
    "binary": BINARY,
    "numeric": NUMERIC,
    "interval": INTERVAL,
}

VN_TYPE_NAMES: Dict[int, str] = {
    INTEGER: "Integer",
    FLOAT: "Float",
    CHAR: "Char",
    VARCHAR: "Varchar",
    BOOLEAN: "Boolean",
    DATE: "Date",
    TIMESTAMP: "Timestamp",
    TIMESTAMPTZ: "TimestampTz",
    TIME: "Time",
    TIMETZ: "TimeTz",
    VARBINARY: "Varbinary",
    BINARY: "Binary",
    NUMERIC: "Numeric",
    INTERVAL: "Interval",
}

CONVERSION_BY_NAME: Dict[str, int] = {
    "ipaddress": CONV_IP_ADDRESS,
    "macaddress": CONV_MAC_ADDRESS,
}

# 型 ID → ネイティブファイル上で許容される列幅
# None は可変長（ヘッダー値 0xFFFFFFFF）を必須とする型
# 空タプルは「固定長ならどの幅でも可」（Char/Binary/Numeric は宣言値で別途検証）
VN_TYPE_WIDTHS: Dict[int, Optional[Tuple[int, ...]]] = {
    INTEGER: (1, 2, 4, 8),
    FLOAT: (8,),
    CHAR: (),
    VARCHAR: None,
    BOOLEAN: (1,),
    DATE: (8,),
    TIMESTAMP: (8,),
    TIMESTAMPTZ: (8,),
    TIME: (8,),
    TIMETZ: (8,),
    VARBINARY: None,
    BINARY: (),
    NUMERIC: (),
    INTERVAL: (8,),
}

__all__ = [
    "INTEGER", "FLOAT", "CHAR", "VARCHAR", "BOOLEAN", "DATE", "TIMESTAMP",
    "TIMESTAMPTZ", "TIME", "TIMETZ", "VARBINARY", "BINARY", "NUMERIC", "INTERVAL",
    "CONV_IP_ADDRESS", "CONV_MAC_ADDRESS", "VARIABLE_WIDTH",
    "ColumnMeta", "VN_TYPE_BY_NAME", "VN_TYPE_NAMES", "CONVERSION_BY_NAME",
    "VN_TYPE_WIDTHS",
]
