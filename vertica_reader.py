#!/usr/bin/env python3
"""
vertica_reader - Vertica native binary file → CSV / JSON / Parquet converter

Vertica のネイティブバイナリ形式（EXPORT TO VERTICA / COPY ... NATIVE）のファイルを
型定義ファイルに従ってデコードし、CSV・JSON・JSON Lines・Parquet として書き出す。

使用例:
    # CSV（出力ファイル名は入力から決定: data.bin → data.csv）
    python vertica_reader.py data.bin -t types.txt

    # 標準出力へ JSON Lines、先頭 10 行のみ
    python vertica_reader.py data.bin -t types.txt -J -o - -l 10

    # gzip 圧縮した CSV、TimestampTz を +9 時間で表示
    python vertica_reader.py data.bin -t types.txt -g -z 9

環境変数:
    VNPARSER_TZ_OFFSET: --tz-offset の既定値
    VNPARSER_HEX_PREFIX: 1 なら --hex-prefix を既定で有効化
    VNPARSER_PARQUET_ROW_GROUP_SIZE: Parquet の行グループ行数（デフォルト: 65536）
    VNPARSER_LOG_LEVEL: ログレベル（デフォルト: WARNING）
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path

from vnparser import (
    ConfigError,
    RenderOptions,
    VerticaNativeError,
    __version__,
    load_column_meta,
    open_native_file,
)
from vnparser.arrow_converter import write_parquet
from vnparser.config import log_level
from vnparser.output_handler import (
    STDOUT,
    open_text_output,
    write_csv,
    write_json,
    write_json_lines,
)

logger = logging.getLogger("vertica_reader")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

FORMAT_CSV, FORMAT_JSON, FORMAT_JSONL, FORMAT_PARQUET = "csv", "json", "jsonl", "parquet"


def _delimiter(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError("delimiter must be a single character")
    return value


def _non_negative(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError("limit must be zero or greater")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vertica-reader",
        description="Convert Vertica native binary files to CSV/JSON/Parquet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
型定義ファイルの書式（1 行 1 列）:
  type[/name[/conversion]]

  Integer/IntCol
  Numeric(10,2)/Price
  Varbinary/Addr/ip-address
        """,
    )
    parser.add_argument("input", help="The file to process")
    parser.add_argument(
        "-o", "--output",
        help="Output file name; use - for stdout (default: name based on input file name)",
    )
    parser.add_argument(
        "-t", "--types", required=True,
        help="File with list of column types, names, and conversions",
    )
    parser.add_argument("-z", "--tz-offset", type=int, default=None, help="+/- hours")
    parser.add_argument(
        "-d", "--delimiter", type=_delimiter, default=",",
        help="Field delimiter for CSV file (default: ,)",
    )
    parser.add_argument(
        "-n", "--no-header", action="store_true",
        help="Don't include column header row in CSV file",
    )
    parser.add_argument(
        "-s", "--single-quotes", action="store_true",
        help="Use ' for quoting in CSV file",
    )
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument(
        "-j", "--json", dest="fmt", action="store_const", const=FORMAT_JSON,
        help="Output in JSON format (default: CSV)",
    )
    fmt.add_argument(
        "-J", "--json-lines", dest="fmt", action="store_const", const=FORMAT_JSONL,
        help="Output in JSON Lines format (default: CSV)",
    )
    fmt.add_argument(
        "-P", "--parquet", dest="fmt", action="store_const", const=FORMAT_PARQUET,
        help="Output in Parquet format (default: CSV)",
    )
    parser.add_argument("-g", "--gzip", action="store_true", help="Compress output file using gzip")
    parser.add_argument(
        "-l", "--limit", type=_non_negative, default=None,
        help="Only take the first LIMIT rows",
    )
    parser.add_argument(
        "-H", "--hex-prefix", action="store_true", default=None,
        help="Prefix hex strings with 0x",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.set_defaults(fmt=FORMAT_CSV)
    return parser


def default_output_path(input_path: str, fmt: str, compress: bool) -> str:
    """入力ファイル名から出力ファイル名を決定（data.bin → data.csv[.gz]）"""
    suffix = "." + fmt
    if compress and fmt != FORMAT_PARQUET:
        suffix += ".gz"
    return str(Path(input_path).with_suffix(suffix))


def _same_file(a: str, b: str) -> bool:
    left, right = Path(a), Path(b)
    if left.exists() and right.exists():
        return left.samefile(right)
    return left.resolve() == right.resolve()


def convert(args: argparse.Namespace) -> int:
    """引数に従って変換を実行し、書き込んだ行数を返す"""
    options = RenderOptions.from_env(tz_offset=args.tz_offset, hex_prefix=args.hex_prefix)
    schema = load_column_meta(args.types)

    output = args.output or default_output_path(args.input, args.fmt, args.gzip)
    if output != STDOUT and _same_file(output, args.input):
        raise VerticaNativeError(f"refusing to overwrite the input file {args.input}")
    if args.fmt == FORMAT_PARQUET and output == STDOUT:
        raise VerticaNativeError("Parquet output cannot be written to stdout")

    with open_native_file(args.input, schema, limit=args.limit) as native:
        logger.info("%s: %d columns, writing %s to %s", args.input, len(native.schema), args.fmt, output)

        if args.fmt == FORMAT_PARQUET:
            if args.gzip:
                warnings.warn("--gzip is ignored for Parquet output")
            return write_parquet(native, output, native.schema, options=options)

        with open_text_output(output, compress=args.gzip) as out:
            if args.fmt == FORMAT_JSON:
                return write_json(native, out, native.schema, options)
            if args.fmt == FORMAT_JSONL:
                return write_json_lines(native, out, native.schema, options)
            return write_csv(
                native, out, native.schema, options,
                delimiter=args.delimiter,
                quotechar="'" if args.single_quotes else '"',
                header=not args.no_header,
            )


def main(argv=None) -> int:
    """メインエントリーポイント"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        level = logging.DEBUG if args.verbose else log_level()
    except ConfigError as e:
        logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
        logger.error("Error: %s", e)
        return 1

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        count = convert(args)
    except (VerticaNativeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("%d rows written", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
