"""
型ごとのデコード・文字列化関数と型 ID → コーデック表

各コーデックは
    decode(raw: bytes, meta: ColumnMeta) -> 値
    render(value, meta: ColumnMeta, options: RenderOptions) -> str
の組。raw は行デコーダが切り出した列 1 つ分のバイト列で、
長さプレフィックスは含まない。

日付・時刻・インターバルは Vertica の基準点からの整数オフセット:
    Date          2000-01-01 からの日数
    Timestamp(Tz) 2000-01-01 00:00:00 からのマイクロ秒
    Time          0 時からのマイクロ秒
    TimeTz        上位 40bit が UTC 0 時からのマイクロ秒、
                  下位 24bit が 86400 - UTC オフセット秒
    Interval      マイクロ秒
"""

from __future__ import annotations

import math
import struct
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, NamedTuple, Optional

from ..config import DEFAULT_RENDER_OPTIONS, RenderOptions
from ..errors import DecodeError
from ..types import (
    ColumnMeta,
    INTEGER, FLOAT, CHAR, VARCHAR, BOOLEAN, DATE, TIMESTAMP, TIMESTAMPTZ,
    TIME, TIMETZ, VARBINARY, BINARY, NUMERIC, INTERVAL,
)
from .conversion import convert_bytes
from .numeric_utils import decode_numeric, digit_count, numeric_to_ascii

# ----------------------------------------------------------------------
# 基準点
# ----------------------------------------------------------------------
VERTICA_EPOCH_DATE = date(2000, 1, 1)
VERTICA_EPOCH = datetime(2000, 1, 1)
VERTICA_EPOCH_UTC = datetime(2000, 1, 1, tzinfo=timezone.utc)

MICROS_PER_SECOND = 1_000_000
MICROS_PER_DAY = 86_400 * MICROS_PER_SECOND
SECONDS_PER_DAY = 86_400

_ONE_MICRO = timedelta(microseconds=1)


class Codec(NamedTuple):
    decode: Callable[[bytes, ColumnMeta], Any]
    render: Callable[[Any, ColumnMeta, RenderOptions], str]


def _int_le(raw: bytes, signed: bool = True) -> int:
    return int.from_bytes(raw, "little", signed=signed)


def _expect_width(raw: bytes, width: int, what: str):
    if len(raw) != width:
        raise DecodeError(f"{what} needs {width} bytes, got {len(raw)}")


def _micros_to_time(micros: int) -> time:
    seconds, us = divmod(micros, MICROS_PER_SECOND)
    minutes, s = divmod(seconds, 60)
    h, m = divmod(minutes, 60)
    return time(h, m, s, us)


def format_utc_offset(seconds: int) -> str:
    """+HH / -HH、分・秒があれば +HH:MM[:SS]"""
    sign = "-" if seconds < 0 else "+"
    hh, rem = divmod(abs(seconds), 3600)
    mm, ss = divmod(rem, 60)
    text = f"{sign}{hh:02d}"
    if mm or ss:
        text += f":{mm:02d}"
    if ss:
        text += f":{ss:02d}"
    return text


# ----------------------------------------------------------------------
# 数値
# ----------------------------------------------------------------------
def decode_integer(raw: bytes, meta: ColumnMeta) -> int:
    if len(raw) not in (1, 2, 4, 8):
        raise DecodeError(f"incorrect integer byte count: {len(raw)}")
    return _int_le(raw)


def decode_float(raw: bytes, meta: ColumnMeta) -> float:
    _expect_width(raw, 8, "float")
    return struct.unpack("<d", raw)[0]


def render_float(value: float, meta: ColumnMeta, options: RenderOptions) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def decode_numeric_column(raw: bytes, meta: ColumnMeta):
    value = decode_numeric(raw, meta.scale)
    if meta.precision is not None and digit_count(value) > meta.precision:
        raise DecodeError(f"numeric value exceeds declared precision {meta.precision}")
    return value


def render_numeric(value, meta: ColumnMeta, options: RenderOptions) -> str:
    return numeric_to_ascii(value)


def decode_boolean(raw: bytes, meta: ColumnMeta) -> bool:
    _expect_width(raw, 1, "boolean")
    if raw[0] not in (0, 1):
        raise DecodeError(f"invalid boolean byte 0x{raw[0]:02X}")
    return raw[0] == 1


def render_boolean(value: bool, meta: ColumnMeta, options: RenderOptions) -> str:
    return "1" if value else "0"


# ----------------------------------------------------------------------
# 文字列・バイト列
# ----------------------------------------------------------------------
def _decode_utf8(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"couldn't convert {raw[:16].hex().upper()} to a string: {e.reason}") from None


def decode_char(raw: bytes, meta: ColumnMeta) -> str:
    # CHAR は宣言幅まで空白で埋められている
    return _decode_utf8(raw).rstrip(" ")


def decode_varchar(raw: bytes, meta: ColumnMeta) -> str:
    return _decode_utf8(raw)


def decode_bytes(raw: bytes, meta: ColumnMeta) -> bytes:
    return bytes(raw)


def render_bytes(value: bytes, meta: ColumnMeta, options: RenderOptions) -> str:
    return convert_bytes(value, meta.conversion, options.hex_prefix)


# ----------------------------------------------------------------------
# 日付・時刻
# ----------------------------------------------------------------------
def decode_date(raw: bytes, meta: ColumnMeta) -> date:
    _expect_width(raw, 8, "date")
    days = _int_le(raw)
    try:
        return VERTICA_EPOCH_DATE + timedelta(days=days)
    except OverflowError:
        raise DecodeError(f"date offset {days} days is out of range") from None


def decode_timestamp(raw: bytes, meta: ColumnMeta) -> datetime:
    _expect_width(raw, 8, "timestamp")
    micros = _int_le(raw)
    try:
        return VERTICA_EPOCH + timedelta(microseconds=micros)
    except OverflowError:
        raise DecodeError(f"timestamp offset {micros} us is out of range") from None


def decode_timestamptz(raw: bytes, meta: ColumnMeta) -> datetime:
    _expect_width(raw, 8, "timestamptz")
    micros = _int_le(raw)
    try:
        return VERTICA_EPOCH_UTC + timedelta(microseconds=micros)
    except OverflowError:
        raise DecodeError(f"timestamptz offset {micros} us is out of range") from None


def render_isoformat(value, meta: ColumnMeta, options: RenderOptions) -> str:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return value.isoformat()


def render_timestamptz(value: datetime, meta: ColumnMeta, options: RenderOptions) -> str:
    # ファイル上の TimestampTz は UTC でオフセットを持たない
    offset_hours = options.tz_offset or 0
    tz = timezone(timedelta(hours=offset_hours))
    try:
        local = value.astimezone(tz)
    except OverflowError:
        raise DecodeError(f"timestamptz {value} is out of range at offset {offset_hours:+d}") from None
    return local.replace(tzinfo=None).isoformat(sep=" ") + format_utc_offset(offset_hours * 3600)


def decode_time(raw: bytes, meta: ColumnMeta) -> time:
    _expect_width(raw, 8, "time")
    micros = _int_le(raw)
    if not 0 <= micros < MICROS_PER_DAY:
        raise DecodeError(f"time offset {micros} us is out of range")
    return _micros_to_time(micros)


def decode_timetz(raw: bytes, meta: ColumnMeta) -> time:
    _expect_width(raw, 8, "timetz")
    word = _int_le(raw, signed=False)
    utc_micros = word >> 24
    offset_seconds = SECONDS_PER_DAY - (word & 0xFFFFFF)

    if utc_micros >= MICROS_PER_DAY:
        raise DecodeError(f"timetz offset {utc_micros} us is out of range")
    if not -SECONDS_PER_DAY < offset_seconds < SECONDS_PER_DAY:
        raise DecodeError(f"timetz zone offset {offset_seconds} s is out of range")

    local = (utc_micros + offset_seconds * MICROS_PER_SECOND) % MICROS_PER_DAY
    tz = timezone(timedelta(seconds=offset_seconds))
    return _micros_to_time(local).replace(tzinfo=tz)


def render_timetz(value: time, meta: ColumnMeta, options: RenderOptions) -> str:
    offset_seconds = int(value.utcoffset().total_seconds())
    local = value.replace(tzinfo=None)

    # 埋め込みオフセットが 0 の場合のみ上書き指定を適用（描画のみ）
    if offset_seconds == 0 and options.tz_offset:
        offset_seconds = options.tz_offset * 3600
        micros = (
            (local.hour * 3600 + local.minute * 60 + local.second) * MICROS_PER_SECOND
            + local.microsecond
        )
        local = _micros_to_time((micros + offset_seconds * MICROS_PER_SECOND) % MICROS_PER_DAY)

    return local.isoformat() + format_utc_offset(offset_seconds)


def decode_interval(raw: bytes, meta: ColumnMeta) -> timedelta:
    _expect_width(raw, 8, "interval")
    micros = _int_le(raw)
    try:
        return timedelta(microseconds=micros)
    except OverflowError:
        raise DecodeError(f"interval {micros} us is out of range") from None


def render_interval(value: timedelta, meta: ColumnMeta, options: RenderOptions) -> str:
    micros = value // _ONE_MICRO
    sign = "-" if micros < 0 else ""
    seconds, frac = divmod(abs(micros), MICROS_PER_SECOND)
    hours, rem = divmod(seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if frac:
        text += f".{frac:06d}"
    return text


def render_str(value, meta: ColumnMeta, options: RenderOptions) -> str:
    return str(value)


# ----------------------------------------------------------------------
# 型 ID → コーデック
# ----------------------------------------------------------------------
CODECS: Dict[int, Codec] = {
    INTEGER: Codec(decode_integer, render_str),
    FLOAT: Codec(decode_float, render_float),
    CHAR: Codec(decode_char, render_str),
    VARCHAR: Codec(decode_varchar, render_str),
    BOOLEAN: Codec(decode_boolean, render_boolean),
    DATE: Codec(decode_date, render_isoformat),
    TIMESTAMP: Codec(decode_timestamp, render_isoformat),
    TIMESTAMPTZ: Codec(decode_timestamptz, render_timestamptz),
    TIME: Codec(decode_time, render_isoformat),
    TIMETZ: Codec(decode_timetz, render_timetz),
    VARBINARY: Codec(decode_bytes, render_bytes),
    BINARY: Codec(decode_bytes, render_bytes),
    NUMERIC: Codec(decode_numeric_column, render_numeric),
    INTERVAL: Codec(decode_interval, render_interval),
}


def codec_for(meta: ColumnMeta) -> Codec:
    return CODECS[meta.vn_type]


def render_value(value: Any, meta: ColumnMeta, options: Optional[RenderOptions] = None) -> str:
    """値を正規テキストに変換（NULL は空文字列）"""
    if value is None:
        return ""
    return CODECS[meta.vn_type].render(value, meta, options or DEFAULT_RENDER_OPTIONS)


__all__ = [
    "Codec",
    "CODECS",
    "codec_for",
    "render_value",
    "format_utc_offset",
    "VERTICA_EPOCH_DATE",
    "VERTICA_EPOCH",
    "VERTICA_EPOCH_UTC",
    "MICROS_PER_DAY",
]
