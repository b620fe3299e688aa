import json
from collections.abc import Mapping
from typing import Any, Literal

import yaml  # type: ignore[import-untyped]
from pyresults import Err, Ok, Result


def serialize(
    text: str,
    parser: Literal["json", "yaml"] | None = None,
) -> Result[dict[str, Any], str]:
    by_json = serialize_by_json(text)
    by_yaml = serialize_by_yaml(text)
    match parser:
        case "json":
            return by_json
        case "yaml":
            return by_yaml
        case None:
            if by_json.is_ok():
                return by_json
            if by_yaml.is_ok():
                return by_yaml
            return Err(f"Invalid graph: {text!s}")


def deserialize(
    mapping: Mapping[str, Any],
    parser: Literal["json", "yaml"] | None = None,
) -> Result[str, str]:
    by_json = deserialize_by_json(mapping)
    by_yaml = deserialize_by_yaml(mapping)
    match parser:
        case "json":
            return by_json
        case "yaml":
            return by_yaml
        case None:
            if by_json.is_ok():
                return by_json
            if by_yaml.is_ok():
                return by_yaml
            return Err(f"Invalid graph: {mapping!s}")


def serialize_by_json(text: str) -> Result[dict[str, Any], str]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(f"Invalid JSON: {e!s}")
    except Exception as e:  # noqa: BLE001
        return Err(f"Unknown error: {e!s}")
    if not isinstance(data, dict):
        return Err(f"Invalid JSON: top level must be an object, got {type(data).__name__}")
    return Ok(data)


def deserialize_by_json(mapping: Mapping[str, Any]) -> Result[str, str]:
    try:
        return Ok(json.dumps(dict(mapping), ensure_ascii=False, indent=2))
    except (TypeError, ValueError) as e:
        return Err(f"Invalid JSON: {e!s}")
    except Exception as e:  # noqa: BLE001
        return Err(f"Unknown error: {e!s}")


def serialize_by_yaml(text: str) -> Result[dict[str, Any], str]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return Err(f"Invalid YAML: {e!s}")
    except Exception as e:  # noqa: BLE001
        return Err(f"Unknown error: {e!s}")
    # 空ファイルは空のグラフ
    if data is None:
        return Ok({})
    if not isinstance(data, dict):
        return Err(f"Invalid YAML: top level must be a mapping, got {type(data).__name__}")
    return Ok(data)


def deserialize_by_yaml(mapping: Mapping[str, Any]) -> Result[str, str]:
    try:
        return Ok(yaml.safe_dump(dict(mapping), allow_unicode=True, sort_keys=False))
    except yaml.YAMLError as e:
        return Err(f"Invalid YAML: {e!s}")
    except Exception as e:  # noqa: BLE001
        return Err(f"Unknown error: {e!s}")


def validate_mapping(raw: Mapping[Any, Any]) -> Result[dict[str, list[str]], str]:
    """Check that a loaded document is a dependency mapping.

    Keys must be strings and values lists of strings; ``None`` is accepted as
    "no dependencies". Key order and dependency order are kept as loaded.
    """
    mapping: dict[str, list[str]] = {}
    for key, deps in raw.items():
        if not isinstance(key, str):
            return Err(f"Invalid module id: {key!r} (must be a string)")
        if deps is None:
            mapping[key] = []
            continue
        if not isinstance(deps, list):
            return Err(f"Invalid dependencies of {key}: expected a list, got {type(deps).__name__}")
        for dep in deps:
            if not isinstance(dep, str):
                return Err(f"Invalid dependency of {key}: {dep!r} (must be a string)")
        mapping[key] = list(deps)
    return Ok(mapping)


def parse_mapping(
    text: str,
    parser: Literal["json", "yaml"] | None = None,
) -> Result[dict[str, list[str]], str]:
    match serialize(text, parser):
        case Ok(raw):
            return validate_mapping(raw)
        case Err(e):
            return Err(e)
        case _:
            return Err("Unexpected error")
