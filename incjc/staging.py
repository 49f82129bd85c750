from contextlib import contextmanager
from pathlib import Path
import logging
import os
import shutil
import tempfile
from typing import Iterable, Iterator

from incjc.exceptions import StagingError

TMP_INCJC_PREFIX = "tmp-incjc-"

logger = logging.getLogger(__name__)

def class_name_to_file_name(class_name: str) -> str:
    """Relative artifact path for a class, e.g. ``a.b.C$D`` -> ``a/b/C$D.class``."""
    return class_name.replace(".", os.sep) + ".class"

def copy_class_files(src: Path, dst: Path, class_names: Iterable[str]) -> None:
    """Copy the artifacts of ``class_names`` from ``src`` into ``dst``.

    Intermediate directories are created as needed. Any failure aborts the
    copy with a ``StagingError`` naming both paths.
    """
    class_names = sorted(class_names)
    if not class_names:
        return
    logger.debug(f"Copying classes to {dst}:\n" + "\n".join(class_names))
    for class_name in class_names:
        rel_path = class_name_to_file_name(class_name)
        src_file = Path(src) / rel_path
        dst_file = Path(dst) / rel_path
        try:
            dst_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src_file, dst_file)
        except OSError as e:
            raise StagingError(f"Failed to copy class from {src_file} to {dst_file}") from e

def delete_class_files(class_path: Path, class_names: Iterable[str]) -> None:
    for class_name in sorted(class_names):
        file_path = Path(class_path) / class_name_to_file_name(class_name)
        logger.debug(f"Deleting class file {file_path}")
        try:
            file_path.unlink()
        except OSError as e:
            raise StagingError(f"Failed to delete class file {file_path}") from e

def clean_directory(directory: Path) -> None:
    """Empty ``directory``, creating it when missing."""
    directory = Path(directory)
    try:
        if not directory.exists():
            directory.mkdir(parents=True)
            return
        for child in directory.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
    except OSError as e:
        raise StagingError(f"Failed to clean directory {directory}") from e

@contextmanager
def temp_dir() -> Iterator[Path]:
    """Fresh temporary directory, removed on exit whatever happens."""
    try:
        path = Path(tempfile.mkdtemp(prefix=TMP_INCJC_PREFIX))
    except OSError as e:
        raise StagingError("Failed to create temporary directory") from e
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
