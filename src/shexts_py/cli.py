"""ShEx -> TypeScript generator: CLI entry point.

Usage:
    shexts --input FILE [--output FILE] [--format shexc|shexj] [--emitter types|context|methods]
    shexts --input-dir DIR --output-dir DIR [--format shexc|shexj]
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Optional

from shexts_py.config import GeneratorConfig
from shexts_py.errors import ShExTypesError
from shexts_py.generator.driver import generate_module
from shexts_py.parser.shexc_parser import ShExParseError, parse_shexc, parse_shexc_file
from shexts_py.parser.shexj_parser import parse_shexj_file
from shexts_py.schema.shex import ShExSchema

logger = logging.getLogger(__name__)

EXTENSIONS = {"shexc": ".shex", "shexj": ".json"}


def _detect_format(path: str) -> str:
    return "shexj" if path.endswith(".json") else "shexc"


def load_schema(input_path: str, fmt: Optional[str] = None) -> ShExSchema:
    fmt = fmt or _detect_format(input_path)
    if fmt == "shexc":
        return parse_shexc_file(input_path)
    if fmt == "shexj":
        return parse_shexj_file(input_path)
    raise ValueError(f"Unknown format: {fmt!r}")


def convert_file(
    input_path: str,
    output_path: Optional[str] = None,
    fmt: Optional[str] = None,
    config: Optional[GeneratorConfig] = None,
) -> str:
    """Convert a single file.

    Args:
        input_path: Path to input file.
        output_path: Optional output file path. If None, nothing is written.
        fmt: 'shexc' or 'shexj'; guessed from the extension when omitted.
        config: Generation options. The module name is taken from the input
            file name.

    Returns:
        The generated TypeScript module.
    """
    fmt = fmt or _detect_format(input_path)
    stem = os.path.splitext(os.path.basename(input_path))[0]
    config = replace(config or GeneratorConfig(), module_name=stem)

    shex = None
    if fmt == "shexc":
        with open(input_path, "r", encoding="utf-8") as f:
            shex = f.read()
        schema = parse_shexc(shex)
    else:
        schema = load_schema(input_path, fmt)
    logger.debug("Parsed %s: %d shapes", input_path, len(schema.shapes))
    result = generate_module(schema, config, shex)

    if output_path:
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(result)

    return result


def convert_batch(
    input_dir: str,
    output_dir: str,
    fmt: str = "shexc",
    config: Optional[GeneratorConfig] = None,
) -> tuple[int, int]:
    """Convert all files in a directory.

    Returns:
        (success_count, failure_count)
    """
    os.makedirs(output_dir, exist_ok=True)
    ext_in = EXTENSIONS[fmt]

    ok = 0
    fail = 0

    for filename in sorted(os.listdir(input_dir)):
        if not filename.endswith(ext_in):
            continue

        input_path = os.path.join(input_dir, filename)
        output_name = filename[: -len(ext_in)] + ".ts"
        output_path = os.path.join(output_dir, output_name)

        try:
            convert_file(input_path, output_path, fmt, config)
            print(f"  OK  {filename} -> {output_name}")
            ok += 1
        except (ShExParseError, ShExTypesError, ValueError, OSError) as e:
            print(f"  FAIL {filename}: {e}")
            fail += 1

    return ok, fail


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="ShEx -> TypeScript generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--input", "-i",
        help="Input file path",
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--format", "-f",
        choices=sorted(EXTENSIONS),
        help="Input format (default: from the file extension, shexc in batch mode)",
    )
    parser.add_argument(
        "--emitter", "-e",
        choices=["types", "context", "methods"],
        default="types",
        help="Output flavor: plain types, types plus name contexts, or "
             "shex-methods shape objects on top of those (ShExC input only)",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Spaces per indentation level",
    )
    parser.add_argument(
        "--no-preamble",
        action="store_true",
        help="Do not emit the import lines",
    )
    parser.add_argument(
        "--input-dir",
        help="Input directory for batch conversion",
    )
    parser.add_argument(
        "--output-dir",
        help="Output directory for batch conversion",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log generation details",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = GeneratorConfig(
        emitter=args.emitter,
        indent=args.indent,
        include_preamble=not args.no_preamble,
    )

    if args.input_dir and args.output_dir:
        ok, fail = convert_batch(args.input_dir, args.output_dir, args.format or "shexc", config)
        print(f"\nConverted {ok} files, {fail} failed")
        return 1 if fail else 0

    if args.input:
        try:
            result = convert_file(args.input, args.output, args.format, config)
        except (ShExParseError, ShExTypesError, ValueError, OSError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        if not args.output:
            print(result)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
