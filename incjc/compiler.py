import logging
import os
from typing import Collection, List, Optional, Protocol, TextIO

from incjc.config import BuildConfig
from incjc.process import run_process

class Compiler(Protocol):
    async def compile(self, sources: Collection[str], classpath: str, dst_dir: str) -> bool:
        ...

class JavacCompiler:
    """Runs ``javac`` with output streamed through to the caller's streams.

    Compilation errors are not exceptions: ``compile`` returns ``False`` and
    javac's own diagnostics have already been written to ``stderr``.
    """

    def __init__(self, config: BuildConfig, stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None):
        self.config = config
        self.stdout = stdout
        self.stderr = stderr
        self.logger = logging.getLogger(__name__)

    def build_command(self, sources: Collection[str], classpath: str, dst_dir: str) -> List[str]:
        cp = classpath
        if self.config.extra_classpath:
            cp += os.pathsep + self.config.extra_classpath
        return [
            self.config.jdk_executable("javac"),
            *self.config.javac_options,
            "-cp", cp,
            "-d", dst_dir,
            *sorted(sources),
        ]

    async def compile(self, sources: Collection[str], classpath: str, dst_dir: str) -> bool:
        cmd = self.build_command(sources, classpath, dst_dir)
        retval = await run_process(cmd, stdout=self.stdout, stderr=self.stderr)
        if retval != 0:
            self.logger.debug(f"javac exited with {retval}")
        return retval == 0
