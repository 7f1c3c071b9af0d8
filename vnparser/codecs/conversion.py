"""Varbinary / Binary 値の文字列化（16 進・IP アドレス・MAC アドレス）"""

from __future__ import annotations

import ipaddress
import logging
from typing import Optional

from ..types import CONV_IP_ADDRESS, CONV_MAC_ADDRESS

logger = logging.getLogger(__name__)


def to_hex(data: bytes, prefix: bool = False) -> str:
    """1 バイト 2 桁の大文字 16 進表記"""
    text = data.hex().upper()
    return "0x" + text if prefix else text


def to_ip_address(data: bytes) -> Optional[str]:
    """4 バイトは IPv4, 16 バイトは IPv6（IPv4 射影アドレスは IPv4 表記）"""
    if len(data) == 4:
        return str(ipaddress.IPv4Address(data))
    if len(data) == 16:
        addr = ipaddress.IPv6Address(data)
        if addr.ipv4_mapped is not None:
            return str(addr.ipv4_mapped)
        return str(addr)
    return None


def to_mac_address(data: bytes) -> Optional[str]:
    if len(data) != 6:
        return None
    return ":".join(f"{b:02X}" for b in data)


_CONVERTERS = {
    CONV_IP_ADDRESS: to_ip_address,
    CONV_MAC_ADDRESS: to_mac_address,
}


def convert_bytes(data: bytes, conversion: Optional[int], hex_prefix: bool = False) -> str:
    """
    変換ヒントに従って文字列化する

    バイト長が変換に合わない場合は 16 進表記にフォールバックし、行は失敗させない
    """
    if conversion is not None:
        text = _CONVERTERS[conversion](data)
        if text is not None:
            return text
        logger.debug("conversion %d does not fit %d bytes, falling back to hex", conversion, len(data))
    return to_hex(data, hex_prefix)


__all__ = ["to_hex", "to_ip_address", "to_mac_address", "convert_bytes"]
