import os
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, patch
from incjc.compiler import JavacCompiler
from incjc.config import BuildConfig

def test_build_command():
    config = BuildConfig(jdk_home=Path("/jdk"), extra_classpath="/libs/a.jar", javac_options=["-g"])
    compiler = JavacCompiler(config)

    cmd = compiler.build_command({"/src/B.java", "/src/A.java"}, "/tmp/cp", "/tmp/out")

    assert cmd == [
        str(Path("/jdk") / "bin" / "javac"), "-g",
        "-cp", "/tmp/cp" + os.pathsep + "/libs/a.jar",
        "-d", "/tmp/out",
        "/src/A.java", "/src/B.java",
    ]

def test_build_command_without_extra_classpath():
    cmd = JavacCompiler(BuildConfig()).build_command({"/src/A.java"}, "/cp", "/out")

    assert cmd == ["javac", "-cp", "/cp", "-d", "/out", "/src/A.java"]

@pytest.mark.asyncio
@pytest.mark.parametrize("retval,expected", [(0, True), (1, False)])
async def test_compile_maps_exit_status(retval, expected):
    compiler = JavacCompiler(BuildConfig())
    with patch("incjc.compiler.run_process", new_callable=AsyncMock, return_value=retval) as mock_run:
        assert await compiler.compile({"/src/A.java"}, "/cp", "/out") is expected
    assert mock_run.call_args.args[0][0] == "javac"
