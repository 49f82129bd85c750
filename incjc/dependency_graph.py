import logging
from typing import Container, Dict, Iterable, Iterator, Optional, Set, Tuple

logger = logging.getLogger(__name__)

class DependencyGraph:
    """Reverse dependency graph between compiled classes.

    An edge ``B -> {A}`` means that A's bytecode references B, so rebuilding
    B may invalidate A. All mutation goes through ``add_edge``, ``add_class``
    and ``remove_classes``; traversal is iterative so large or cyclic graphs
    are safe.

    Example:
        ```python
        graph = DependencyGraph()
        graph.add_class("app.Y", {"app.X"})
        graph.dependents_closure({"app.X"})  # {"app.X", "app.Y"}
        ```
    """

    def __init__(self):
        self._dependents: Dict[str, Set[str]] = {}

    def add_edge(self, dependency: str, dependent: str) -> None:
        self._dependents.setdefault(dependency, set()).add(dependent)

    def add_class(self, class_name: str, depends_on: Iterable[str]) -> None:
        """Record every class ``class_name`` references."""
        for dependency in depends_on:
            self.add_edge(dependency, class_name)

    def dependents(self, class_name: str) -> Set[str]:
        return set(self._dependents.get(class_name, ()))

    def remove_classes(self, class_names: Set[str]) -> None:
        """Drop classes together with their outgoing and incoming edges."""
        for name in class_names:
            self._dependents.pop(name, None)
        empty = []
        for dependency, dependents in self._dependents.items():
            dependents -= class_names
            if not dependents:
                empty.append(dependency)
        for dependency in empty:
            del self._dependents[dependency]

    def retain(self, known_classes: Set[str]) -> None:
        """Keep only edges whose both ends are in ``known_classes``."""
        unknown = set(self._dependents) - known_classes
        for dependents in self._dependents.values():
            unknown |= dependents - known_classes
        if unknown:
            logger.debug(f"Dropping edges of {len(unknown)} classes outside the compilation unit")
            self.remove_classes(unknown)

    def dependents_closure(self, seed: Set[str], known: Optional[Container[str]] = None) -> Set[str]:
        """Return ``seed`` plus every class transitively depending on it.

        Args:
            seed: Classes that changed directly
            known: When given, dependents not contained in it are stale and skipped

        Returns:
            Set[str]: The impact closure
        """
        closure = set(seed)
        frontier = set(seed)
        while frontier:
            next_frontier = set()
            for class_name in frontier:
                for dependent in self._dependents.get(class_name, ()):
                    if dependent in closure or dependent in next_frontier:
                        continue
                    if known is not None and dependent not in known:
                        logger.debug(f"Skipping stale dependent {dependent} of {class_name}")
                        continue
                    next_frontier.add(dependent)
            closure |= next_frontier
            frontier = next_frontier
            if frontier:
                logger.debug("Dependency search -- next class set:\n" + "\n".join(sorted(frontier)))
        return closure

    def edges(self) -> Iterator[Tuple[str, str]]:
        """Iterate over ``(dependency, dependent)`` pairs."""
        for dependency, dependents in self._dependents.items():
            for dependent in dependents:
                yield dependency, dependent

    def as_dict(self) -> Dict[str, Set[str]]:
        return {dependency: set(dependents) for dependency, dependents in self._dependents.items()}

    def __contains__(self, class_name: str) -> bool:
        return class_name in self._dependents

    def __len__(self):
        return len(self._dependents)

    def __eq__(self, other):
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._dependents == other._dependents
