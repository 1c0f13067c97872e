"""CIRCULAR_REFERENCE — cycles in the item-to-item reference graph.

The graph is ``ScanResult.references``: GUIDs in deep field values resolved
to indexed items while the scan built its relationships.
A depth-first search keeps an explicit stack of (node, neighbor iterator)
frames plus the set of nodes on that stack; an edge back into the stack
closes a cycle. Cycles are normalized by rotating the smallest id to the
front, so A→B→C→A and B→C→A→B are reported once.
"""

from __future__ import annotations

from collections.abc import Iterator

from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


def find_cycles(adjacency: dict[str, list[str]]) -> list[list[str]]:
    """Return the distinct cycles closed by back edges, in discovery order."""
    visited: set[str] = set()
    seen: set[tuple[str, ...]] = set()
    cycles: list[list[str]] = []

    for root in adjacency:
        if root in visited:
            continue

        path: list[str] = [root]
        on_stack: set[str] = {root}
        visited.add(root)
        call_stack: list[tuple[str, Iterator[str]]] = [(root, iter(adjacency.get(root, [])))]

        while call_stack:
            _node, it = call_stack[-1]
            pushed = False
            for neighbor in it:
                if neighbor in on_stack:
                    cycle = path[path.index(neighbor) :]
                    key = _normalize(cycle)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(list(key))
                elif neighbor not in visited:
                    visited.add(neighbor)
                    on_stack.add(neighbor)
                    path.append(neighbor)
                    call_stack.append((neighbor, iter(adjacency.get(neighbor, []))))
                    pushed = True
                    break

            if not pushed:
                call_stack.pop()
                on_stack.discard(path.pop())

    return cycles


def _normalize(cycle: list[str]) -> tuple[str, ...]:
    start = cycle.index(min(cycle))
    return tuple(cycle[start:] + cycle[:start])


class CircularReferenceDetector:
    name = "circular_reference"
    category = IssueCategory.CIRCULAR_REFERENCE

    def detect(self, scan: ScanResult) -> list[Issue]:
        issues: list[Issue] = []

        for cycle in find_cycles(scan.references):
            names = [scan.items[i].name if i in scan.items else i for i in cycle]
            chain = " → ".join(names + names[:1])
            first = scan.items.get(cycle[0])
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    category=self.category,
                    title="Circular reference detected",
                    description=f"Items reference each other in a cycle: {chain}.",
                    item_id=cycle[0],
                    item_path=first.path if first else None,
                    recommendation="Review and break the circular dependency.",
                    metadata={"cycle": cycle, "item_names": names},
                )
            )

        return issues
