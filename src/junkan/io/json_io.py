from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from pyresults import Err, Ok, Result

from junkan.util.meta_parser import deserialize, parse_mapping

GRAPH_SUFFIXES = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def export_graph(
    mapping: dict[str, Sequence[str]],
    path: str,
    parser: Literal["json", "yaml"] = "json",
) -> None:
    data = {mid: list(deps) for mid, deps in mapping.items()}
    match deserialize(data, parser):
        case Ok(text):
            pass
        case Err(e):
            raise ValueError(e)
        case _:
            _msg = "Unexpected error"
            raise ValueError(_msg)
    _path = Path(path)
    if not _path.exists():
        _path.touch()
    else:
        _msg = f"File already exists: {_path}"
        raise FileExistsError(_msg)
    with _path.open("w", encoding="utf-8") as f:
        f.write(text)


def export_json(mapping: dict[str, Sequence[str]], path: str) -> None:
    export_graph(mapping, path, "json")


def import_json(path: str) -> dict[str, list[str]]:
    _path = Path(path)
    if not _path.exists():
        _msg = f"File not found: {_path}"
        raise FileNotFoundError(_msg)
    with _path.open(encoding="utf-8") as f:
        text = f.read()
    match parse_mapping(text, "json"):
        case Ok(mapping):
            return mapping  # type: ignore[no-any-return]
        case Err(e):
            raise ValueError(e)
        case _:
            _msg = "Unexpected error"
            raise ValueError(_msg)


def is_graph_file(path: str) -> bool:
    return Path(path).suffix.lower() in GRAPH_SUFFIXES


def load_mapping(path: str) -> Result[dict[str, list[str]], str]:
    """Load a dependency mapping from a ``.json`` / ``.yaml`` / ``.yml`` file."""
    _path = Path(path)
    parser = GRAPH_SUFFIXES.get(_path.suffix.lower())
    if parser is None:
        return Err(f"Unsupported graph file: {_path} (use .json, .yaml or .yml)")
    if not _path.is_file():
        return Err(f"File not found: {_path}")
    if parser == "json":
        try:
            return Ok(import_json(path))
        except (OSError, ValueError) as e:
            return Err(f"Failed to load {_path}: {e!s}")
    try:
        text = _path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(f"Failed to read {_path}: {e!s}")
    return parse_mapping(text, parser)  # type: ignore[arg-type]
