"""
描画オプションと環境変数による既定値

環境変数:
    VNPARSER_TZ_OFFSET: TimestampTz / TimeTz 描画時のオフセット（時間, 符号付き整数）
    VNPARSER_HEX_PREFIX: 1/true/yes/on で 16 進表記に 0x を付ける（0/false/no/off 以外はエラー）
    VNPARSER_PARQUET_ROW_GROUP_SIZE: Parquet 出力時の 1 バッチ行数
    VNPARSER_LOG_LEVEL: CLI のログレベル（既定: WARNING）
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("", "0", "false", "no", "off")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_flag(name: str) -> bool:
    raw = os.environ.get(name, "0")
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be one of 1/0, true/false, yes/no, on/off, got {raw!r}")


@dataclass(frozen=True)
class RenderOptions:
    """
    値 → テキスト変換時のオプション

    コーデック呼び出しごとに明示的に渡す（グローバル状態は持たない）。
    tz_offset は描画のみに影響し、デコード済みの値は変更しない。
    """
    tz_offset: Optional[int] = None  # 時間単位, None = 指定なし
    hex_prefix: bool = False

    def __post_init__(self):
        if self.tz_offset is not None and not -23 <= self.tz_offset <= 23:
            raise ConfigError(f"tz offset must be between -23 and 23 hours, got {self.tz_offset}")

    @classmethod
    def from_env(cls, tz_offset: Optional[int] = None, hex_prefix: Optional[bool] = None) -> "RenderOptions":
        """環境変数を既定値とし、明示引数があればそちらを優先"""
        if tz_offset is None:
            tz_offset = _env_int("VNPARSER_TZ_OFFSET", None)
        if hex_prefix is None:
            hex_prefix = _env_flag("VNPARSER_HEX_PREFIX")
        return cls(tz_offset=tz_offset, hex_prefix=hex_prefix)


DEFAULT_RENDER_OPTIONS = RenderOptions()


def parquet_row_group_size() -> int:
    size = _env_int("VNPARSER_PARQUET_ROW_GROUP_SIZE", 65536)
    if size is None or size <= 0:
        raise ConfigError("VNPARSER_PARQUET_ROW_GROUP_SIZE must be positive")
    return size


def log_level() -> int:
    """VNPARSER_LOG_LEVEL（レベル名または数値）を logging のレベル値に変換"""
    raw = os.environ.get("VNPARSER_LOG_LEVEL", "WARNING")
    name = raw.strip().upper() or "WARNING"
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"VNPARSER_LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


__all__ = [
    "RenderOptions",
    "DEFAULT_RENDER_OPTIONS",
    "parquet_row_group_size",
    "log_level",
]
