"""Build a module dependency mapping from a tree of Python source files.

Only module-level ``import`` / ``from ... import`` statements are considered,
since those are the ones executed while a module is being imported. Imports
that do not resolve to a module inside the scanned tree (stdlib, third-party
packages, typos) are dropped.
"""

import ast
from collections.abc import Iterable
from pathlib import Path

from pyresults import Err, Ok, Result

from junkan.core.models import ImportSpec, Module, ModuleId, to_mapping
from junkan.util.dirs import DEFAULT_EXCLUDES, split_excludes
from junkan.util.logger import setup_logger

logger = setup_logger("junkan", is_stream=True)


def module_name(root: Path, path: Path) -> ModuleId:
    """Dotted module name of ``path``.

    When ``root`` is itself a package (has ``__init__.py``) its name becomes the
    first component, so absolute imports of that package still resolve.
    """
    prefix = [root.resolve().name] if (root / "__init__.py").exists() else []
    parts = list(path.relative_to(root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    parts = prefix + parts
    if not parts:
        # root直下の __init__.py かつ root がパッケージでないケース
        return root.resolve().name
    return ".".join(parts)


def iter_source_files(root: Path, *, excludes: Iterable[str] = ()) -> list[Path]:
    _excludes = set(excludes)
    files = []
    for path in sorted(root.rglob("*.py")):
        if any(part in _excludes for part in path.relative_to(root).parts):
            continue
        if path.is_file():
            files.append(path)
    return files


def extract_imports(source: str | bytes, *, filename: str = "<unknown>") -> Result[list[ImportSpec], str]:
    try:
        tree = ast.parse(source, filename=filename)
    except (SyntaxError, ValueError) as e:
        return Err(f"Failed to parse {filename}: {e!s}")

    specs: list[ImportSpec] = []
    # トップレベルの文だけ (関数内importは読み込み時に実行されない)
    for node in tree.body:
        if isinstance(node, ast.Import):
            for alias in node.names:
                specs.append(ImportSpec(module=alias.name, lineno=node.lineno))
        elif isinstance(node, ast.ImportFrom):
            specs.append(
                ImportSpec(
                    module=node.module,
                    names=[alias.name for alias in node.names],
                    level=node.level,
                    lineno=node.lineno,
                ),
            )
    return Ok(specs)


def _anchor(spec: ImportSpec, importer: Module) -> str | None:
    if spec.level == 0:
        return spec.module
    base = importer.package.split(".") if importer.package else []
    keep = len(base) - (spec.level - 1)
    if keep <= 0:
        # トップレベルパッケージより上への相対import
        return None
    anchor = ".".join(base[:keep])
    if spec.module:
        anchor = f"{anchor}.{spec.module}"
    return anchor


def _longest_known(name: str, known: set[ModuleId]) -> ModuleId | None:
    parts = name.split(".")
    for i in range(len(parts), 0, -1):
        candidate = ".".join(parts[:i])
        if candidate in known:
            return candidate
    return None


def resolve_import(spec: ImportSpec, *, importer: Module, known: set[ModuleId]) -> list[ModuleId]:
    """Resolve one import statement to modules of the scanned tree.

    ``from X import n`` points at the submodule ``X.n`` when there is one and
    at ``X`` otherwise. A module only depends on itself through a plain
    ``import`` of its exact name; reaching itself through a prefix or a
    ``from`` fallback is not a dependency.
    """
    anchor = _anchor(spec, importer)
    if anchor is None:
        _msg = f"{importer.path}:{spec.lineno}: relative import beyond top-level package"
        logger.warning(_msg)
        return []

    resolved: list[ModuleId] = []

    def _add(target: ModuleId | None, *, exact: bool) -> None:
        if target is None:
            return
        if target == importer.id and not exact:
            return
        if target not in resolved:
            resolved.append(target)

    if not spec.names:
        target = _longest_known(anchor, known)
        _add(target, exact=target == anchor)
        return resolved

    for name in spec.names:
        submodule = f"{anchor}.{name}"
        if name != "*" and submodule in known:
            _add(submodule, exact=True)
            continue
        target = _longest_known(anchor, known)
        _add(target, exact=False)
    return resolved


def build_modules(
    root: str | Path,
    *,
    excludes: Iterable[str] | None = None,
) -> Result[dict[ModuleId, Module], str]:
    # "." や ".." でもパッケージ名が取れるように絶対パスにする
    _root = Path(root).resolve()
    if not _root.is_dir():
        return Err(f"Not a directory: {_root}")
    _excludes = split_excludes(DEFAULT_EXCLUDES) if excludes is None else list(excludes)

    modules: dict[ModuleId, Module] = {}
    for path in iter_source_files(_root, excludes=_excludes):
        mid = module_name(_root, path)
        if mid in modules:
            _msg = f"Duplicate module {mid}: {path.as_posix()} (using {modules[mid].path})"
            logger.warning(_msg)
            continue
        modules[mid] = Module(id=mid, path=path.as_posix(), is_package=path.name == "__init__.py")
    logger.debug(f"Found {len(modules)} modules under {_root.as_posix()}")

    known = set(modules)
    for module in modules.values():
        try:
            source = Path(module.path).read_bytes()
        except OSError as e:
            _msg = f"Failed to read {module.path}: {e!s}"
            logger.warning(_msg)
            continue
        match extract_imports(source, filename=module.path):
            case Ok(specs):
                for spec in specs:
                    for dep in resolve_import(spec, importer=module, known=known):
                        if dep not in module.dependencies:
                            module.dependencies.append(dep)
            case Err(e):
                logger.warning(e)
            case _:
                _msg = f"Unexpected error: {module.path}"
                logger.warning(_msg)
    return Ok(modules)


def build_mapping(
    root: str | Path,
    *,
    excludes: Iterable[str] | None = None,
) -> Result[dict[ModuleId, list[ModuleId]], str]:
    match build_modules(root, excludes=excludes):
        case Ok(modules):
            return Ok(to_mapping(modules))
        case Err(e):
            return Err(e)
        case _:
            return Err("Unexpected error")
