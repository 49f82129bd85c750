from pathlib import Path
import hashlib
import logging
import os
from typing import Dict, Iterable, Mapping, Set

from incjc.exceptions import SourceDiscoveryError
from incjc.types import SourceChanges

CLASS_FILE_SUFFIX = ".class"

logger = logging.getLogger(__name__)

def compute_file_hash(file_path: Path) -> str:
    """Compute SHA-256 hex digest of file contents."""
    hasher = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                hasher.update(chunk)
    except OSError as e:
        raise SourceDiscoveryError(f"Failed to calculate hash for {file_path}") from e
    return hasher.hexdigest()

def _find_files(root: Path, suffix: str) -> Set[str]:
    def on_error(e: OSError):
        raise SourceDiscoveryError(f"Failed while scanning {root}: {e}") from e

    found = set()
    for dirpath, _, filenames in os.walk(root, onerror=on_error):
        for name in filenames:
            path = os.path.join(dirpath, name)
            if name.endswith(suffix) and os.path.isfile(path):
                found.add(path)
    return found

def find_all_sources(source_dir: str, suffix: str = ".java") -> Set[str]:
    """Find every source file below ``source_dir``, as absolute path strings."""
    root = Path(source_dir)
    if not root.is_dir():
        raise SourceDiscoveryError(f"Source directory not found: {source_dir}")
    return _find_files(root, suffix)

def find_all_class_files(classes_root: Path) -> Set[str]:
    return _find_files(Path(classes_root), CLASS_FILE_SUFFIX)

def find_changed_and_new_sources(all_sources: Iterable[str],
                                 prev_hashes: Mapping[str, str]) -> Dict[str, str]:
    """Identify which sources have changed since the last build.

    Args:
        all_sources: Every source currently in the tree
        prev_hashes: Source hashes recorded by the previous build

    Returns:
        Dict[str, str]: Changed or new source paths mapped to their current hash
    """
    result = {}
    for src in all_sources:
        old_hash = prev_hashes.get(src)
        new_hash = compute_file_hash(Path(src))
        logger.debug(f"Comparing hashes for {src}:\nold = {old_hash}\nnew = {new_hash}")
        if old_hash != new_hash:
            result[src] = new_hash

    if result:
        logger.debug("Changed / new sources:\n" + "\n".join(sorted(result)))
    else:
        logger.debug("No changed / new sources found")
    return result

def detect_changes(all_sources: Set[str], prev_hashes: Mapping[str, str]) -> SourceChanges:
    """Compare the current source set to the previous build's hashes."""
    changed = find_changed_and_new_sources(all_sources, prev_hashes)
    deleted = set(prev_hashes) - set(all_sources)
    if deleted:
        logger.debug("Deleted sources:\n" + "\n".join(sorted(deleted)))
    return SourceChanges(changed=changed, deleted=deleted)
