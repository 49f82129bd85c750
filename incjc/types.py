from dataclasses import dataclass, field
from typing import Dict, List, Set

@dataclass
class ClassFileDesc:
    """Facts recovered from a single compiled class file.

    This class stores what the class file examiner reports about one class:
    its name, the source file it was compiled from and the classes it
    references.

    Attributes:
        full_class_name (str): Fully qualified class name, e.g. ``pkg.Outer$Inner``
        source_file (str): Source file path relative to the source tree root
        depends_on (Set[str]): Names of referenced classes, platform classes excluded
    """
    full_class_name: str
    source_file: str
    depends_on: Set[str] = field(default_factory=set)

@dataclass
class SourceChanges:
    """Result of comparing the current source tree to the previous build.

    Attributes:
        changed (Dict[str, str]): Changed or new source paths mapped to their fresh hash
        deleted (Set[str]): Previously known source paths that no longer exist
    """
    changed: Dict[str, str]
    deleted: Set[str]

    @property
    def seed(self) -> Set[str]:
        """All sources touched by the change, deleted ones included."""
        return set(self.changed) | self.deleted

    def __bool__(self):
        return bool(self.changed or self.deleted)

@dataclass
class BuildResult:
    """Outcome of a single build attempt.

    Attributes:
        success (bool): Whether the compiler accepted the input
        full_build (bool): Whether all sources were compiled from scratch
        compiled_sources (List[str]): Sources handed to the compiler, sorted
        new_classes (Set[str]): Classes produced by this attempt
        deleted_classes (Set[str]): Classes removed from the output directory
    """
    success: bool
    full_build: bool = False
    compiled_sources: List[str] = field(default_factory=list)
    new_classes: Set[str] = field(default_factory=set)
    deleted_classes: Set[str] = field(default_factory=set)

    @property
    def nothing_compiled(self) -> bool:
        return self.success and not self.compiled_sources
