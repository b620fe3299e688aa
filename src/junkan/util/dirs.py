import os
import re
from pathlib import Path

DEFAULT_HOME = os.environ.get("JK_HOME_DIR", (Path.home() / ".junkan").as_posix())
DEFAULT_ENV_PATH = (Path(DEFAULT_HOME) / "config.env").as_posix()

DEFAULT_SEPARATOR = " -> "
DEFAULT_EXCLUDES = ".git,.venv,venv,__pycache__,build,dist,node_modules"


def ensure_dirs() -> None:
    _path = Path(DEFAULT_HOME)
    _path.mkdir(parents=True, exist_ok=True)


def split_excludes(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def is_truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in ("1", "true", "yes")


def load_env(path: str = DEFAULT_ENV_PATH) -> dict[str, str]:
    env: dict[str, str] = {}
    _path = Path(path)
    if _path.exists():
        with _path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                m = re.match(r"([^=]+)=(.*)", line)
                if m:
                    key = m.group(1).strip()
                    val = m.group(2)
                    # SEPARATORは前後の空白も意味を持つので引用符で囲めるようにする
                    val = val.strip()
                    if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):
                        val = val[1:-1]
                    env[key] = val

    # OS環境変数を上書き優先
    env.update(
        {
            "SEPARATOR": os.environ.get("JK_SEPARATOR", env.get("SEPARATOR", DEFAULT_SEPARATOR)),
            "EXCLUDES": os.environ.get("JK_EXCLUDES", env.get("EXCLUDES", DEFAULT_EXCLUDES)),
            "LOG_FILE": os.environ.get("JK_LOG_FILE", env.get("LOG_FILE", "0")),
        },
    )
    return env
