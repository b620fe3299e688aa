import contextlib
import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import pytest
import yaml  # type: ignore[import-untyped]

from junkan.cli.parser import EXIT_CYCLES, EXIT_ERROR, EXIT_OK, build_parser, main


def _write(root: Path, rel: str, source: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def test_parser_requires_subcommand() -> None:
    with pytest.raises(SystemExit), contextlib.redirect_stderr(io.StringIO()):
        build_parser().parse_args([])


class TestCli(unittest.TestCase):
    """CLI (check / graph) のテスト"""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        # ユーザーの config.env に左右されないよう固定する
        self.env_patch = mock.patch.dict(
            os.environ,
            {"JK_SEPARATOR": " -> ", "JK_EXCLUDES": ".git,__pycache__", "JK_LOG_FILE": "0"},
        )
        self.env_patch.start()

    def tearDown(self) -> None:
        self.env_patch.stop()
        self.tmp.cleanup()

    def _run(self, argv: list[str]) -> tuple[int, str]:
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            code = main(argv)
        return code, buf.getvalue()

    def test_check_directory_without_cycles(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import os\n")
        code, out = self._run(["check", (self.root / "src").as_posix()])
        assert code == EXIT_OK
        assert "No circular dependencies detected." in out

    def test_check_directory_with_cycle(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import c\n")
        _write(self.root, "src/c.py", "from a import x\n")
        code, out = self._run(["check", (self.root / "src").as_posix()])
        assert code == EXIT_CYCLES
        assert out == "Circular dependencies detected:\na -> b -> c\n"

    def test_check_custom_separator(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import a\n")
        code, out = self._run(["check", (self.root / "src").as_posix(), "--sep", " => "])
        assert code == EXIT_CYCLES
        assert "a => b" in out

    def test_check_exclude(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import a\n")
        code, _ = self._run(["check", (self.root / "src").as_posix(), "--exclude", "b.py"])
        assert code == EXIT_OK

    def test_check_graph_file(self) -> None:
        path = _write(self.root, "graph.json", json.dumps({"A": ["B"], "B": ["C"], "C": ["A"]}))
        code, out = self._run(["check", path.as_posix()])
        assert code == EXIT_CYCLES
        assert "A -> B -> C" in out

    def test_check_yaml_graph_file(self) -> None:
        path = _write(self.root, "graph.yaml", "A: [A]\nB: []\n")
        code, out = self._run(["check", path.as_posix()])
        assert code == EXIT_CYCLES
        assert out.splitlines()[1] == "A"

    def test_check_invalid_graph_file(self) -> None:
        path = _write(self.root, "graph.json", '{"A": 1}')
        code, out = self._run(["check", path.as_posix()])
        assert code == EXIT_ERROR
        assert out.startswith("Error:")

    def test_check_missing_path(self) -> None:
        code, out = self._run(["check", (self.root / "nothing").as_posix()])
        assert code == EXIT_ERROR
        assert "Error:" in out

    def test_graph_export(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py")
        out_path = self.root / "graph.json"
        code, out = self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix()])
        assert code == EXIT_OK
        assert "exported 2 modules" in out
        assert json.loads(out_path.read_text(encoding="utf-8")) == {"a": ["b"], "b": []}

        # 既存ファイルは上書きしない
        code, out = self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix()])
        assert code == EXIT_ERROR
        assert "already exists" in out

    def test_graph_export_missing_parent(self) -> None:
        """出力先のディレクトリが無い場合はトレースバックではなくエラー終了"""
        _write(self.root, "src/a.py")
        out_path = self.root / "missing_dir" / "graph.json"
        code, out = self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix()])
        assert code == EXIT_ERROR
        assert out.startswith("Error:")
        assert not out_path.exists()

    def test_graph_export_yaml(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import a\n")
        out_path = self.root / "graph.yaml"
        code, _ = self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix()])
        assert code == EXIT_OK
        assert yaml.safe_load(out_path.read_text(encoding="utf-8")) == {"a": ["b"], "b": ["a"]}

        code, out = self._run(["check", out_path.as_posix()])
        assert code == EXIT_CYCLES
        assert "a -> b" in out

    def test_graph_export_format_option(self) -> None:
        _write(self.root, "src/a.py")
        out_path = self.root / "graph.txt"
        code, _ = self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix(), "--format", "yaml"])
        assert code == EXIT_OK
        assert out_path.read_text(encoding="utf-8").strip() == "a: []"

    def test_graph_export_then_check(self) -> None:
        _write(self.root, "src/a.py", "import b\n")
        _write(self.root, "src/b.py", "import a\n")
        out_path = self.root / "graph.json"
        self._run(["graph", (self.root / "src").as_posix(), out_path.as_posix()])
        code, out = self._run(["check", out_path.as_posix()])
        assert code == EXIT_CYCLES
        assert "a -> b" in out

    def test_graph_missing_directory(self) -> None:
        code, out = self._run(["graph", (self.root / "nothing").as_posix(), (self.root / "g.json").as_posix()])
        assert code == EXIT_ERROR
        assert "Not a directory" in out


if __name__ == "__main__":
    unittest.main()
