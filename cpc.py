#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import os
import posixpath
from pathlib import Path
from typing import Dict, List

from cp_address import AddressError
from cp_context import PreprocessorContext, LogLevel
from cp_diagnostics import Diagnostic, diag_from_exception
from cp_errors import OutputCollisionError, PreprocessorError
from cp_lexer import TokenKind, Lexer, LexerError
from cp_logger import log_info, log_error
from cp_module import read_source
from cp_parser import ParseError, parse_program
from cp_paths import DEFAULT_SOURCE_EXTENSIONS
from cp_preprocessor import Deployment, Preprocessor
from cp_resolver import Resolver

# Failures that are reported as diagnostics; anything else is a bug and propagates.
REPORTED_ERRORS = (PreprocessorError, LexerError, ParseError, AddressError)

ALIASES_ENV = "CP_ALIASES"


def _load_file_lines(path: str, cache: Dict[str, List[str]]) -> List[str]:
    if path not in cache:
        text = Path(path).read_text(encoding="utf-8")
        cache[path] = text.splitlines()
    return cache[path]


def print_diagnostic_with_snippet(diag: Diagnostic, file_cache: Dict[str, List[str]], context: PreprocessorContext = None) -> None:
    # First line: header
    log_error(context, diag.format())

    if not diag.filename or diag.line is None:
        return

    try:
        lines = _load_file_lines(diag.filename, file_cache)
    except (OSError, UnicodeDecodeError):
        # Can't read file; fall back to header only
        return

    line_idx = diag.line - 1
    if not (0 <= line_idx < len(lines)):
        return

    src_line = lines[line_idx]

    # Pretty "N | ..." formatting (calculate width so multi-digit line numbers align)
    width = max(5, len(str(diag.line)))
    gutter = f"{diag.line:>{width}} | "

    log_error(context, gutter + src_line)

    if diag.column is None:
        return

    start_col = max(1, diag.column)
    if diag.end_line is None or diag.end_column is None:
        end_col = start_col
    elif diag.end_line == diag.line:
        end_col = max(start_col, diag.end_column)
    else:
        end_col = len(src_line) + 1

    caret_width = max(1, end_col - start_col)
    caret_prefix = " " * width + " | " + " " * (start_col - 1)
    log_error(context, caret_prefix + "^" * caret_width)


def report_failure(error: Exception, context: PreprocessorContext) -> int:
    print_diagnostic_with_snippet(diag_from_exception(error), {}, context)
    return 1


def build_context(args: argparse.Namespace) -> PreprocessorContext:
    """Build a PreprocessorContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.ERROR

    extensions = tuple(getattr(args, 'ext', None) or DEFAULT_SOURCE_EXTENSIONS)
    return PreprocessorContext(
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
        source_extensions=tuple(e if e.startswith(".") else f".{e}" for e in extensions),
        replace_all_occurrences=getattr(args, 'replace_all', False),
    )


def build_aliases(context: PreprocessorContext, args: argparse.Namespace) -> Dict[str, str]:
    """
    Alias table from $CP_ALIASES ("Key=0x01,Other=0x02") overridden by --alias flags.
    """
    aliases: Dict[str, str] = {}
    env_value = os.getenv(ALIASES_ENV)
    if env_value:
        for entry in env_value.split(","):
            entry = entry.strip()
            if not entry:
                continue
            key, sep, address = entry.partition("=")
            if not sep or not key.strip() or not address.strip():
                raise AddressError(f"[ADR-0010] invalid alias entry {entry!r} in ${ALIASES_ENV}, expected KEY=ADDRESS")
            aliases[key.strip()] = address.strip()
    for key, address in getattr(args, 'alias', None) or []:
        aliases[key] = address
    alias_list = ",".join(f"'{k}'" for k in sorted(aliases))
    log_info(context, f"Alias(es): {alias_list or '<none>'}")
    return aliases


def _output_paths(plan: List[Deployment], out_dir: Path) -> List[Path]:
    """One output file per contract, named after its source; refuse two contracts sharing a name."""
    owners: Dict[Path, str] = {}
    paths: List[Path] = []
    for step in plan:
        out_path = out_dir / posixpath.basename(step.module.source_path)
        if out_path in owners:
            raise OutputCollisionError(str(out_path), owners[out_path], step.module.name)
        owners[out_path] = step.module.name
        paths.append(out_path)
    return paths


def cmd_order(args: argparse.Namespace) -> int:
    """Print the deployment order of the given contracts."""
    context = build_context(args)
    try:
        preprocessor = Preprocessor(aliases=build_aliases(context, args), context=context)
        for name, source, target in args.contract or []:
            preprocessor.add_contract_source(name, source, target)
        plan = preprocessor.deployment_plan()
        out_paths = _output_paths(plan, Path(args.output_dir)) if args.output_dir else []
    except REPORTED_ERRORS as e:
        return report_failure(e, context)

    for i, step in enumerate(plan, start=1):
        print(f"{i}. {step.module.name} -> {step.target.literal()} ({step.module.source_path})")

    if args.show_code:
        for step in plan:
            print()
            print(f"=== Contract {step.module.name} ===")
            print(step.code)

    if out_paths:
        Path(args.output_dir).mkdir(parents=True, exist_ok=True)
        for step, out_path in zip(plan, out_paths):
            out_path.write_text(step.code, encoding="utf-8")
            log_info(context, f"Wrote {out_path}")

    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Rewrite the file imports of a single script or transaction."""
    context = build_context(args)
    try:
        aliases = build_aliases(context, args)
        code = read_source(args.file)
        resolver = Resolver(code, filename=args.file, context=context)
        contracts = {source: target for _, source, target in args.contract or []}
        resolved = resolver.resolve_imports(args.file, contracts, aliases)
    except REPORTED_ERRORS as e:
        return report_failure(e, context)

    if args.output:
        Path(args.output).write_text(resolved, encoding="utf-8")
        log_info(context, f"Wrote {args.output}")
    else:
        print(resolved, end="")
    return 0


def cmd_imports(args: argparse.Namespace) -> int:
    """List the import declarations of a file."""
    context = build_context(args)
    try:
        program = parse_program(read_source(args.file), args.file)
    except REPORTED_ERRORS as e:
        return report_failure(e, context)

    for imp in program.import_declarations():
        line = imp.span.start_line if imp.span else 0
        column = imp.span.start_column if imp.span else 0
        names = ", ".join(imp.identifiers)
        suffix = f"  [{names}]" if names else ""
        print(f"{args.file}:{line}:{column}:\t{imp.location.kind.value:<8} {imp.location}{suffix}")
    return 0


def cmd_tok(args: argparse.Namespace) -> int:
    """Dump lexer tokens of a file."""
    context = build_context(args)
    try:
        tokens = Lexer(read_source(args.file), filename=args.file).tokenize()
    except REPORTED_ERRORS as e:
        return report_failure(e, context)

    for tok in tokens:
        if not args.include_eof and tok.kind is TokenKind.EOF:
            continue
        # Format: file:line:col: KIND  'text'
        print(f"{args.file}:{tok.line}:{tok.column}:\t{tok.kind.name:<12} {tok.text!r}")
    return 0


def _add_contract_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-c", "--contract",
        nargs=3,
        action="append",
        metavar=("NAME", "PATH", "ADDRESS"),
        default=[],
        help="Contract source and its target address (can be passed multiple times)",
    )
    p.add_argument(
        "-a", "--alias",
        nargs=2,
        action="append",
        metavar=("KEY", "ADDRESS"),
        default=[],
        help=f"Address for imports whose alias key is KEY (can be passed multiple times; default: ${ALIASES_ENV})",
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="cpc", description="Contract import preprocessor")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")
    parser.add_argument("--replace-all",
                        action='store_true',
                        default=False,
                        help="Rewrite every occurrence of a resolved import location, not just the first")
    parser.add_argument("--ext",
                        action="append",
                        default=[],
                        help="Source extension stripped to form alias keys (can be passed multiple times; "
                             f"default: {' '.join(DEFAULT_SOURCE_EXTENSIONS)})")

    ###########################
    # order command
    ###########################
    p_order = subparsers.add_parser("order", help="Print the deployment order", aliases=["deploy"])
    _add_contract_args(p_order)
    p_order.add_argument("--show-code", action="store_true",
                         help="Also print the rewritten code of every contract")
    p_order.add_argument("--output-dir", "-o",
                         help="Write the rewritten contracts to this directory")
    p_order.set_defaults(func=cmd_order)

    ###########################
    # resolve command
    ###########################
    p_resolve = subparsers.add_parser("resolve", help="Rewrite the file imports of a script or transaction")
    _add_contract_args(p_resolve)
    p_resolve.add_argument("--output", "-o", help="Output file (default: stdout)")
    p_resolve.add_argument("file", help="Source file to rewrite")
    p_resolve.set_defaults(func=cmd_resolve)

    ###########################
    # imports command
    ###########################
    p_imports = subparsers.add_parser("imports", help="List import declarations")
    p_imports.add_argument("file", help="Source file")
    p_imports.set_defaults(func=cmd_imports)

    ###########################
    # tok command
    ###########################
    p_tok = subparsers.add_parser("tok", help="Dump lexer tokens", aliases=["tokens"])
    p_tok.add_argument("--include-eof", "-I", action="store_true",
                       help="Include the EOF token in the output")
    p_tok.add_argument("file", help="Source file")
    p_tok.set_defaults(func=cmd_tok)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
