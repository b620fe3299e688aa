# ruff: noqa: T201

from collections.abc import Sequence

from junkan.util.dirs import DEFAULT_SEPARATOR

HEADER = "Circular dependencies detected:"


def format_cycle(cycle: Sequence[str], sep: str = DEFAULT_SEPARATOR) -> str:
    return sep.join(cycle)


def build_message(cycles: Sequence[Sequence[str]], sep: str = DEFAULT_SEPARATOR) -> str:
    if not cycles:
        return ""
    lines = [format_cycle(cycle, sep) for cycle in cycles]
    return HEADER + "\n" + "\n".join(lines)


def print_cycles(cycles: Sequence[Sequence[str]], sep: str = DEFAULT_SEPARATOR) -> None:
    if not cycles:
        print("No circular dependencies detected.")
        return
    print(build_message(cycles, sep))
