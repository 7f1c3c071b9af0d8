"""
型ごとのデコード・文字列化関数（コーデック表）
"""

from .conversion import convert_bytes, to_hex
from .data_decoder import CODECS, Codec, codec_for, render_value
from .numeric_utils import NumericValue, decode_numeric, encode_numeric, numeric_to_ascii

__all__ = [
    "Codec",
    "CODECS",
    "codec_for",
    "render_value",
    "convert_bytes",
    "to_hex",
    "NumericValue",
    "decode_numeric",
    "encode_numeric",
    "numeric_to_ascii",
]
