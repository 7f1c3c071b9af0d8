"""
numeric_utils.py
================
NUMERIC 値のデコードと 10 進文字列化。

ネイティブファイル上の NUMERIC は列幅全体で 1 つの符号付き 2 の補数整数
（スケールなしの値）を表す。64bit ワード単位で上位ワードが先に並び、
各ワード内はリトルエンディアン。

    NUMERIC(38,0) = 1234532 (24 バイト)
    00 00 00 00 00 00 00 00 | 00 00 00 00 00 00 00 00 | 64 D6 12 00 00 00 00 00

浮動小数点を経由せず、(符号, ビッグエンディアン絶対値バイト列, scale) の
ままで文字列化するので精度は失われない。
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..errors import DecodeError

_WORD = 8


@dataclass(frozen=True)
class NumericValue:
    """符号・絶対値（ビッグエンディアン）・スケールで表した NUMERIC 値"""
    sign: int          # -1, 0, 1
    magnitude: bytes   # ビッグエンディアン符号なし
    scale: int

    @property
    def unscaled(self) -> int:
        """スケール適用前の符号付き整数"""
        return self.sign * int.from_bytes(self.magnitude, "big")

    def to_decimal(self) -> Decimal:
        return Decimal(numeric_to_ascii(self))

    def __str__(self) -> str:
        return numeric_to_ascii(self)


def words_to_big_endian(raw: bytes) -> bytes:
    """64bit ワード列（上位ワード先頭・ワード内 LE）をビッグエンディアンに並べ替え"""
    if len(raw) == 0 or len(raw) % _WORD != 0:
        raise DecodeError(f"numeric width must be a positive multiple of 8, got {len(raw)}")
    return b"".join(raw[i:i + _WORD][::-1] for i in range(0, len(raw), _WORD))


def decode_numeric(raw: bytes, scale: int) -> NumericValue:
    """ネイティブ NUMERIC バイト列を NumericValue に変換"""
    value = int.from_bytes(words_to_big_endian(raw), "big", signed=True)
    sign = (value > 0) - (value < 0)
    magnitude = abs(value).to_bytes(len(raw), "big")
    return NumericValue(sign=sign, magnitude=magnitude, scale=scale)


def encode_numeric(unscaled: int, width: int) -> bytes:
    """スケールなし整数をネイティブ NUMERIC バイト列に変換（テスト・ファイル生成用）"""
    # ワード順の入れ替えは自身が逆変換になる
    return words_to_big_endian(unscaled.to_bytes(width, "big", signed=True))


def numeric_to_ascii(value: NumericValue) -> str:
    """
    小数点を右から scale 桁の位置に置いた 10 進文字列を返す

    小数部は常にちょうど scale 桁（0 は scale=2 で "0.00"）
    """
    digits = str(int.from_bytes(value.magnitude, "big"))
    scale = value.scale

    if scale > 0:
        # 整数部が空にならないよう先頭を 0 で埋める
        digits = digits.rjust(scale + 1, "0")
        digits = f"{digits[:-scale]}.{digits[-scale:]}"

    if value.sign < 0:
        return "-" + digits
    return digits


def digit_count(value: NumericValue) -> int:
    """有効桁数（0 は 1 桁）"""
    return len(str(int.from_bytes(value.magnitude, "big")))


__all__ = [
    "NumericValue",
    "decode_numeric",
    "encode_numeric",
    "numeric_to_ascii",
    "digit_count",
    "words_to_big_endian",
]
