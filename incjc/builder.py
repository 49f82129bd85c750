from pathlib import Path
import logging
import os
from typing import Optional, Set

from incjc.change_detector import (
    compute_file_hash,
    detect_changes,
    find_all_class_files,
    find_all_sources,
)
from incjc.compiler import Compiler, JavacCompiler
from incjc.config import BuildConfig
from incjc.examiner import ClassFileExaminer, JdkClassFileExaminer
from incjc.exceptions import SourceDiscoveryError
from incjc.meta_info import MetaInfo
from incjc.staging import clean_directory, copy_class_files, delete_class_files, temp_dir
from incjc.types import BuildResult

class IncrementalBuilder:
    """Recompiles only what changed in a source tree.

    The first build of a source tree compiles everything and records which
    classes each source produced and which classes depend on which. Later
    builds recompile changed sources plus everything that transitively
    depends on them, against a staged copy of the unaffected classes, and
    only touch the real output directory once the compiler has succeeded.

    Example:
        ```python
        config = load_config()
        builder = IncrementalBuilder(config)
        result = await builder.compile("build/classes", "src/main/java")
        if not result.success:
            print("Compilation failed")
        ```
    """

    def __init__(self, config: BuildConfig, compiler: Optional[Compiler] = None,
                 examiner: Optional[ClassFileExaminer] = None):
        self.config = config
        self.compiler = compiler or JavacCompiler(config)
        self.examiner = examiner or JdkClassFileExaminer(config.jdk_executable)
        self.logger = logging.getLogger(__name__)

    async def compile(self, classpath: str, source_dir: str) -> BuildResult:
        """Bring ``classpath`` up to date with ``source_dir``.

        Args:
            classpath: Output directory, also used as the compile classpath
            source_dir: Root of the source tree

        Returns:
            BuildResult: ``success`` is False when the compiler rejected the sources

        Raises:
            IncJCError: If the filesystem, metadata or an external tool fails
        """
        abs_classpath = os.path.abspath(classpath)
        abs_source_dir = os.path.abspath(source_dir)

        all_sources = find_all_sources(abs_source_dir, self.config.source_suffix)
        if not all_sources:
            self.logger.info("No sources found.")
            return BuildResult(success=True)
        self.logger.debug("All sources:\n" + "\n".join(sorted(all_sources)))

        meta_path = self.config.meta_path_for(abs_source_dir)
        if not MetaInfo.exists_in(meta_path):
            self.logger.info(f"No meta information found in {meta_path}. Recompiling all sources.")
            return await self.compile_fully(abs_source_dir, all_sources, abs_classpath, meta_path)
        return await self.compile_incrementally(abs_source_dir, all_sources, abs_classpath, meta_path)

    async def compile_fully(self, source_dir: str, sources: Set[str], classpath: str,
                            meta_path: Path) -> BuildResult:
        """Clean the output directory and compile every source into it.

        Args:
            source_dir: Absolute source tree root
            sources: Every source in the tree
            classpath: Absolute output directory
            meta_path: Metadata directory, recreated on success

        Returns:
            BuildResult: Marked ``full_build``; metadata is only written on success
        """
        class_path = Path(classpath)
        if class_path.exists() and not class_path.is_dir():
            raise SourceDiscoveryError(f"Classpath provided is not a directory: {class_path}")
        clean_directory(class_path)

        compiled = sorted(sources)
        if not await self.compiler.compile(sources, classpath, classpath):
            return BuildResult(success=False, full_build=True, compiled_sources=compiled)

        MetaInfo.create_or_reset(meta_path)
        meta_info = MetaInfo.load(meta_path)
        new_classes = await self.enrich_meta_info(meta_info, source_dir, sources, class_path)
        meta_info.save()
        return BuildResult(success=True, full_build=True, compiled_sources=compiled,
                           new_classes=new_classes)

    async def compile_incrementally(self, source_dir: str, sources: Set[str], classpath: str,
                                    meta_path: Path) -> BuildResult:
        """Recompile changed sources and their dependents against staged classes.

        The output directory and metadata change only after javac succeeds.

        Args:
            source_dir: Absolute source tree root
            sources: Every source currently in the tree
            classpath: Absolute output directory
            meta_path: Existing metadata directory

        Returns:
            BuildResult: Compiled sources, new classes and removed classes
        """
        meta_info = MetaInfo.load(meta_path)
        changes = detect_changes(sources, meta_info.sources)
        seed = changes.seed
        sources_to_recompile = (meta_info.affected_sources(seed) | seed) - changes.deleted
        # classes of deleted sources go too, they must not linger in the output
        classes_to_skip = meta_info.classes_by_sources(sources_to_recompile | changes.deleted)
        class_path = Path(classpath)

        if not sources_to_recompile:
            if not changes.deleted:
                self.logger.info("Nothing to compile.")
                return BuildResult(success=True)
            self.logger.info("Nothing to compile. Removing classes of deleted sources.")
            meta_info.delete_classes_and_deps(classes_to_skip)
            meta_info.delete_sources(changes.deleted)
            meta_info.save()
            delete_class_files(class_path, classes_to_skip)
            return BuildResult(success=True, deleted_classes=classes_to_skip)

        compiled = sorted(sources_to_recompile)
        self.logger.info("Sources to compile:\n" + "\n".join(compiled))

        with temp_dir() as classpath_copy, temp_dir() as javac_dest:
            copy_class_files(class_path, classpath_copy, set(meta_info.classes) - classes_to_skip)
            if not await self.compiler.compile(sources_to_recompile, str(classpath_copy), str(javac_dest)):
                return BuildResult(success=False, compiled_sources=compiled)

            meta_info.delete_classes_and_deps(classes_to_skip)
            meta_info.delete_sources(changes.deleted)
            new_classes = await self.enrich_meta_info(meta_info, source_dir, sources_to_recompile, javac_dest)
            meta_info.save()
            delete_class_files(class_path, classes_to_skip)
            copy_class_files(javac_dest, class_path, new_classes)

        return BuildResult(success=True, compiled_sources=compiled, new_classes=new_classes,
                           deleted_classes=classes_to_skip - new_classes)

    async def enrich_meta_info(self, meta_info: MetaInfo, source_dir: str, sources: Set[str],
                               classes_root: Path) -> Set[str]:
        """Record hashes of ``sources`` and the facts of every class under ``classes_root``.

        Returns:
            Set[str]: Names of the classes found under ``classes_root``
        """
        meta_info.add_sources({src: compute_file_hash(Path(src)) for src in sources})

        new_class_names = set()
        for desc in await self.examiner.examine(find_all_class_files(classes_root)):
            source_path = os.path.join(source_dir, desc.source_file)
            if source_path not in meta_info.sources:
                self.logger.warning(f"Class {desc.full_class_name} compiled from unknown source {source_path}")
            meta_info.add_class(desc, source_path)
            new_class_names.add(desc.full_class_name)
        meta_info.prune_deps()
        return new_class_names
