from pathlib import Path
import logging
import shutil
from typing import Dict, Iterator, Optional, Set, Tuple

from incjc.dependency_graph import DependencyGraph
from incjc.exceptions import ConsistencyError, MetaInfoError
from incjc.types import ClassFileDesc

CLASSES_FILE = "classes.txt"
SOURCES_FILE = "sources.txt"
DEPS_FILE = "deps.txt"
FIELD_SEP = "->"

logger = logging.getLogger(__name__)

def _read_pairs(file_path: Path) -> Iterator[Tuple[str, str]]:
    with open(file_path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, 1):
            line = line.rstrip("\n")
            if not line:
                continue
            parts = line.split(FIELD_SEP)
            if len(parts) != 2:
                raise MetaInfoError(f"Malformed line {line_number} in {file_path}: {line!r}")
            yield parts[0], parts[1]

def _write_pairs(file_path: Path, pairs) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        for key, value in pairs:
            f.write(f"{key}{FIELD_SEP}{value}\n")

class MetaInfo:
    """Persisted build metadata for one source tree.

    Three flat tables live in the metadata directory:

    - ``sources.txt``: source path -> content hash
    - ``classes.txt``: class name -> source path
    - ``deps.txt``: dependency class -> dependent class, one edge per line

    The store is only considered present when all three files exist.

    Example:
        ```python
        if not MetaInfo.exists_in(path):
            MetaInfo.create_or_reset(path)
        meta = MetaInfo.load(path)
        affected = meta.affected_sources({"/src/app/X.java"})
        meta.save()
        ```
    """

    def __init__(self, meta_dir: Path, sources: Optional[Dict[str, str]] = None,
                 classes: Optional[Dict[str, str]] = None,
                 deps: Optional[DependencyGraph] = None):
        self.meta_dir = Path(meta_dir)
        self.sources: Dict[str, str] = sources if sources is not None else {}
        self.classes: Dict[str, str] = classes if classes is not None else {}
        self.deps = deps if deps is not None else DependencyGraph()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def exists_in(meta_dir: Path) -> bool:
        meta_dir = Path(meta_dir)
        return (meta_dir.is_dir()
                and (meta_dir / CLASSES_FILE).is_file()
                and (meta_dir / SOURCES_FILE).is_file()
                and (meta_dir / DEPS_FILE).is_file())

    @staticmethod
    def create_or_reset(meta_dir: Path) -> None:
        """Replace whatever is at ``meta_dir`` with an empty, valid store."""
        meta_dir = Path(meta_dir)
        try:
            if meta_dir.is_dir() and not meta_dir.is_symlink():
                shutil.rmtree(meta_dir)
            elif meta_dir.exists() or meta_dir.is_symlink():
                meta_dir.unlink()
            meta_dir.mkdir(parents=True)
            for name in (CLASSES_FILE, SOURCES_FILE, DEPS_FILE):
                (meta_dir / name).touch()
        except OSError as e:
            raise MetaInfoError(f"Failed to initialize metainfo directory {meta_dir}") from e

    @classmethod
    def load(cls, meta_dir: Path) -> "MetaInfo":
        meta_dir = Path(meta_dir)
        try:
            sources = dict(_read_pairs(meta_dir / SOURCES_FILE))
            classes = dict(_read_pairs(meta_dir / CLASSES_FILE))
            deps = DependencyGraph()
            for dependency, dependent in _read_pairs(meta_dir / DEPS_FILE):
                deps.add_edge(dependency, dependent)
        except (OSError, ValueError) as e:
            raise MetaInfoError(f"Failed to parse metainfo in {meta_dir}: {e}") from e
        logger.debug(f"Loaded metainfo from {meta_dir}: {len(sources)} sources, {len(classes)} classes")
        return cls(meta_dir, sources, classes, deps)

    def save(self) -> None:
        """Rewrite the whole store from the in-memory tables."""
        self.create_or_reset(self.meta_dir)
        try:
            _write_pairs(self.meta_dir / CLASSES_FILE, self.classes.items())
            _write_pairs(self.meta_dir / SOURCES_FILE, self.sources.items())
            _write_pairs(self.meta_dir / DEPS_FILE, self.deps.edges())
        except OSError as e:
            raise MetaInfoError(f"Failed to save metainfo to {self.meta_dir}") from e
        self.logger.debug(f"Saved metainfo to {self.meta_dir}")

    def affected_sources(self, changed_sources: Set[str]) -> Set[str]:
        """Find every source whose classes transitively depend on the given sources.

        Classes of ``changed_sources`` seed the search; the reverse dependency
        graph is walked to a fixed point and the resulting classes are mapped
        back to their sources.

        Args:
            changed_sources: Changed, new and deleted source paths

        Returns:
            Set[str]: Sources of all impacted classes, including the seeds' own

        Raises:
            ConsistencyError: If an impacted class has no known source
        """
        class_set = self.classes_by_sources(changed_sources)
        self.logger.debug("Dependency search -- initial class set:\n" + "\n".join(sorted(class_set)))

        closure = self.deps.dependents_closure(class_set, known=self.classes)

        result = set()
        for class_name in closure:
            source = self.classes.get(class_name)
            if source is None:
                raise ConsistencyError(f"Internal error; no source known for class {class_name}")
            result.add(source)
        return result

    def classes_by_sources(self, sources: Set[str]) -> Set[str]:
        return {cls for cls, src in self.classes.items() if src in sources}

    def delete_classes_and_deps(self, classes_to_delete: Set[str]) -> None:
        for cls in classes_to_delete:
            self.classes.pop(cls, None)
        self.deps.remove_classes(classes_to_delete)

    def delete_sources(self, sources_to_delete: Set[str]) -> None:
        for src in sources_to_delete:
            self.sources.pop(src, None)

    def add_sources(self, more_sources: Dict[str, str]) -> None:
        self.sources.update(more_sources)

    def add_class(self, desc: ClassFileDesc, source_path: str) -> None:
        """Record a freshly compiled class and its reverse edges."""
        self.classes[desc.full_class_name] = source_path
        self.deps.add_class(desc.full_class_name, desc.depends_on)

    def prune_deps(self) -> None:
        """Drop dependency edges that leave this compilation unit."""
        self.deps.retain(set(self.classes))
