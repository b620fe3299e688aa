# ruff: noqa: T201

import argparse
import sys
from pathlib import Path

from pyresults import Err, Ok, Result

from junkan.core.graph import build_mapping
from junkan.core.validate import detect
from junkan.io.json_io import GRAPH_SUFFIXES, export_graph, is_graph_file, load_mapping
from junkan.io.std_io import print_cycles
from junkan.util.dirs import is_truthy, load_env, split_excludes
from junkan.util.logger import setup_logger, setup_mode

EXIT_OK = 0
EXIT_CYCLES = 1
EXIT_ERROR = 2

logger = setup_logger("junkan", is_stream=True)


def _excludes(args: argparse.Namespace, env: dict[str, str]) -> list[str]:
    excludes = split_excludes(env["EXCLUDES"])
    # --exclude は設定ファイルの値に追加する
    excludes.extend(args.exclude or [])
    return excludes


def load_graph(path: str, *, excludes: list[str]) -> Result[dict[str, list[str]], str]:
    """Read a graph file, or scan a source directory."""
    if Path(path).is_dir():
        return build_mapping(path, excludes=excludes)
    if is_graph_file(path):
        return load_mapping(path)
    return Err(f"Not a source directory or graph file: {path}")


def cmd_check(args: argparse.Namespace) -> int:
    env = load_env()
    sep = args.sep if args.sep is not None else env["SEPARATOR"]

    match load_graph(args.path, excludes=_excludes(args, env)):
        case Ok(mapping):
            pass
        case Err(e):
            print(f"Error: {e}")
            return EXIT_ERROR
        case _:
            print("Error: Unexpected error")
            return EXIT_ERROR

    _msg = f"Checking {len(mapping)} modules in {args.path}"
    logger.info(_msg)
    cycles = detect(mapping)
    print_cycles(cycles, sep)
    if cycles:
        return EXIT_CYCLES
    return EXIT_OK


def cmd_graph(args: argparse.Namespace) -> int:
    env = load_env()
    match build_mapping(args.path, excludes=_excludes(args, env)):
        case Ok(mapping):
            pass
        case Err(e):
            print(f"Error: {e}")
            return EXIT_ERROR
        case _:
            print("Error: Unexpected error")
            return EXIT_ERROR

    # --format が無ければ出力ファイルの拡張子で決める
    fmt = args.format or GRAPH_SUFFIXES.get(Path(args.out).suffix.lower(), "json")
    try:
        export_graph(mapping, args.out, fmt)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_ERROR
    print(f"exported {len(mapping)} modules to {args.out}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="junkan", description="Circular dependency checker")
    p.add_argument("--debug", action="store_true", help="enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # check
    sp = sub.add_parser("check", help="report circular dependencies")
    sp.add_argument("path", help="source directory or graph file (.json/.yaml/.yml)")
    sp.add_argument("--exclude", action="append", help="directory or file name to skip (repeatable)")
    sp.add_argument("--sep", help="separator between modules of a cycle")
    sp.set_defaults(func=cmd_check)

    # graph
    sp = sub.add_parser("graph", help="export the dependency graph of a source directory (json or yaml)")
    sp.add_argument("path")
    sp.add_argument("out")
    sp.add_argument("--format", choices=["json", "yaml"], help="output format (default: from the OUT suffix)")
    sp.add_argument("--exclude", action="append", help="directory or file name to skip (repeatable)")
    sp.set_defaults(func=cmd_graph)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_mode(is_debug=args.debug)
    if is_truthy(load_env().get("LOG_FILE")):
        setup_logger("junkan", is_stream=False, is_file=True)
    return args.func(args)  # type: ignore[no-any-return]


if __name__ == "__main__":
    sys.exit(main())
