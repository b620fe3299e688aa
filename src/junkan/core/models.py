from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

ModuleId = str
CycleRecord = list[ModuleId]
DependencyMapping = Mapping[ModuleId, Sequence[ModuleId]]


@dataclass
class ImportSpec:
    module: str | None  # `from . import x` のときは None
    names: list[str] = field(default_factory=list)
    level: int = 0  # 相対importの階層 (絶対importは0)
    lineno: int = 0


@dataclass
class Module:
    id: ModuleId
    path: str
    is_package: bool = False
    dependencies: list[ModuleId] = field(default_factory=list)  # 出現順, 重複なし

    @property
    def package(self) -> str:
        """相対importの基準になるパッケージ名."""
        if self.is_package:
            return self.id
        return self.id.rpartition(".")[0]


def to_mapping(modules: dict[str, Module]) -> dict[ModuleId, list[ModuleId]]:
    return {mid: list(m.dependencies) for mid, m in modules.items()}
