import logging
import os
import re
from typing import Callable, Collection, Dict, List, Protocol

from incjc.exceptions import ConsistencyError
from incjc.process import get_process_output
from incjc.types import ClassFileDesc

SRC_PATTERN = re.compile(r'Compiled from "(.*\.java)"\n(?:[\w-]+ )*?(class|interface|enum|record) ([^\s<]+).*\{')
LEAD_WHITESPACE_PATTERN = re.compile(r"\s+.*")
DEP_PATTERN = re.compile(r"(\S+)\s+->\s+(\S+)")
STANDARD_LIBRARY_PREFIXES = ("java.", "javax.", "javafx.")

class ClassFileExaminer(Protocol):
    """Recovers class, source and dependency facts from compiled class files."""

    async def examine(self, class_files: Collection[str]) -> List[ClassFileDesc]:
        ...

def is_standard_library_class(class_name: str) -> bool:
    return class_name.startswith(STANDARD_LIBRARY_PREFIXES)

def parse_javap_output(javap_out: str) -> Dict[str, ClassFileDesc]:
    """Map each class declared in ``javap`` output to an empty descriptor.

    The source path is relative to the source root: package directories
    followed by the ``Compiled from`` file name.
    """
    desc_map = {}
    for match in SRC_PATTERN.finditer(javap_out):
        class_name = match.group(3)
        package_prefix = ""
        last_dot = class_name.rfind(".")
        if last_dot != -1:
            package_prefix = class_name[:last_dot].replace(".", os.sep) + os.sep
        desc_map[class_name] = ClassFileDesc(
            full_class_name=class_name,
            source_file=package_prefix + match.group(1),
        )
    return desc_map

def fill_dependencies(jdeps_out: str, target: Dict[str, ClassFileDesc]) -> None:
    """Add non-platform dependencies from ``jdeps -v`` output to ``target``."""
    for line in jdeps_out.splitlines():
        if not LEAD_WHITESPACE_PATTERN.fullmatch(line):
            continue
        match = DEP_PATTERN.search(line)
        if match is None:
            continue
        dependent, dependency = match.group(1), match.group(2)
        if is_standard_library_class(dependency):
            continue
        if dependent not in target:
            raise ConsistencyError(f"Internal error; class not found: {dependent}")
        target[dependent].depends_on.add(dependency)

class JdkClassFileExaminer:
    """Class file examiner backed by the JDK's ``javap`` and ``jdeps`` tools.

    Example:
        ```python
        examiner = JdkClassFileExaminer(config.jdk_executable)
        descs = await examiner.examine(find_all_class_files(out_dir))
        ```
    """

    def __init__(self, jdk_executable: Callable[[str], str] = lambda name: name):
        self.jdk_executable = jdk_executable
        self.logger = logging.getLogger(__name__)

    async def examine(self, class_files: Collection[str]) -> List[ClassFileDesc]:
        if not class_files:
            return []
        class_file_list = sorted(str(f) for f in class_files)

        javap_out = await get_process_output([self.jdk_executable("javap"), *class_file_list])
        desc_map = parse_javap_output(javap_out)

        jdeps_out = await get_process_output([self.jdk_executable("jdeps"), "-v", *class_file_list])
        fill_dependencies(jdeps_out, desc_map)

        self.logger.debug(f"Examined {len(class_file_list)} class files, found {len(desc_map)} classes")
        return list(desc_map.values())
