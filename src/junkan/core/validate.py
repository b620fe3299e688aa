from collections.abc import Iterator
from dataclasses import dataclass, field

from junkan.core.models import CycleRecord, DependencyMapping, ModuleId


@dataclass
class _Traversal:
    mapping: DependencyMapping
    visited: set[ModuleId] = field(default_factory=set)
    in_stack: set[ModuleId] = field(default_factory=set)
    path: list[ModuleId] = field(default_factory=list)
    frames: list[tuple[ModuleId, Iterator[ModuleId]]] = field(default_factory=list)
    cycles: list[CycleRecord] = field(default_factory=list)

    def enter(self, node: ModuleId) -> None:
        self.visited.add(node)
        self.in_stack.add(node)
        self.path.append(node)
        # keyに無いnodeは依存0件の葉として扱う
        self.frames.append((node, iter(self.mapping.get(node) or ())))

    def leave(self) -> None:
        node, _ = self.frames.pop()
        self.in_stack.discard(node)
        self.path.pop()

    def explore(self, root: ModuleId) -> None:
        self.enter(root)
        while self.frames:
            _, deps = self.frames[-1]
            for dep in deps:
                if dep not in self.visited:
                    # iteratorは frame に残るので、子の探索後に続きから再開する
                    self.enter(dep)
                    break
                if dep in self.in_stack:
                    # back-edge
                    start = self.path.index(dep)
                    self.cycles.append(self.path[start:])
            else:
                self.leave()


def detect(mapping: DependencyMapping) -> list[CycleRecord]:
    """Detect circular dependencies in a module dependency mapping.

    Performs a depth-first traversal from every unvisited key (in key order),
    exploring dependencies in list order, and records one cycle per back-edge.
    Each cycle starts at the module the back-edge points to and ends at the
    module owning that edge; the first module is not repeated at the end.

    Cycles are neither deduplicated nor canonicalized, so this yields a witness
    per back-edge rather than every simple cycle of the graph.
    The traversal uses an explicit stack, so deep chains are fine.
    """
    state = _Traversal(mapping)
    for node in mapping:
        if node not in state.visited:
            state.explore(node)
    return state.cycles
