import os
import pytest
from unittest.mock import AsyncMock, patch
from incjc.examiner import (
    JdkClassFileExaminer,
    fill_dependencies,
    is_standard_library_class,
    parse_javap_output,
)
from incjc.exceptions import ConsistencyError, ToolError

JAVAP_OUTPUT = """Compiled from "X.java"
public class app.X {
  public app.X();
  public static int v();
}
Compiled from "Y.java"
class app.Y {
  app.Y();
  int w();
}
Compiled from "Outer.java"
class app.deep.Outer$Inner<T> {
}
Compiled from "Api.java"
public interface Api {
}
"""

JDEPS_OUTPUT = """X.class -> java.base
   app.X                                              -> java.lang.Object                                   java.base
Y.class -> not found
   app.Y                                              -> app.X                                              not found
   app.Y                                              -> java.lang.Object                                   java.base
   app.Y                                              -> javax.inject.Inject                                not found
   app.deep.Outer$Inner                               -> org.lib.Helper                                     not found
"""

def test_parse_javap_output():
    descs = parse_javap_output(JAVAP_OUTPUT)

    assert set(descs) == {"app.X", "app.Y", "app.deep.Outer$Inner", "Api"}
    assert descs["app.X"].source_file == os.path.join("app", "X.java")
    assert descs["app.deep.Outer$Inner"].source_file == os.path.join("app", "deep", "Outer.java")
    assert descs["Api"].source_file == "Api.java"

def test_fill_dependencies_skips_platform_classes():
    descs = parse_javap_output(JAVAP_OUTPUT)

    fill_dependencies(JDEPS_OUTPUT, descs)

    assert descs["app.X"].depends_on == set()
    assert descs["app.Y"].depends_on == {"app.X"}
    assert descs["app.deep.Outer$Inner"].depends_on == {"org.lib.Helper"}

def test_fill_dependencies_rejects_unknown_dependent():
    with pytest.raises(ConsistencyError):
        fill_dependencies("   app.Z -> app.X   not found\n", {})

def test_is_standard_library_class():
    assert is_standard_library_class("java.util.List")
    assert is_standard_library_class("javafx.scene.Node")
    assert not is_standard_library_class("javalike.Thing")

@pytest.mark.asyncio
async def test_examine_runs_javap_and_jdeps():
    examiner = JdkClassFileExaminer(lambda name: f"/jdk/bin/{name}")
    with patch("incjc.examiner.get_process_output", new_callable=AsyncMock) as mock_output:
        mock_output.side_effect = [JAVAP_OUTPUT, JDEPS_OUTPUT]
        descs = await examiner.examine({"/out/app/Y.class", "/out/app/X.class"})

    assert {d.full_class_name for d in descs} == {"app.X", "app.Y", "app.deep.Outer$Inner", "Api"}
    first, second = mock_output.call_args_list
    assert first.args[0] == ["/jdk/bin/javap", "/out/app/X.class", "/out/app/Y.class"]
    assert second.args[0] == ["/jdk/bin/jdeps", "-v", "/out/app/X.class", "/out/app/Y.class"]

@pytest.mark.asyncio
async def test_examine_empty_batch_runs_nothing():
    examiner = JdkClassFileExaminer()
    with patch("incjc.examiner.get_process_output", new_callable=AsyncMock) as mock_output:
        assert await examiner.examine(set()) == []
    assert not mock_output.called

@pytest.mark.asyncio
async def test_examine_propagates_tool_failure():
    examiner = JdkClassFileExaminer()
    with patch("incjc.examiner.get_process_output", new_callable=AsyncMock) as mock_output:
        mock_output.side_effect = ToolError("javap failed")
        with pytest.raises(ToolError):
            await examiner.examine({"/out/X.class"})

def test_parse_javap_output_ignores_superclass_names():
    javap_out = (
        'Compiled from "Subclass.java"\n'
        "public class app.Subclass extends app.Base implements app.Marker {\n"
        "}\n"
        'Compiled from "Shape.java"\n'
        "public abstract sealed class app.Shape permits app.Circle {\n"
        "}\n"
    )

    descs = parse_javap_output(javap_out)

    assert set(descs) == {"app.Subclass", "app.Shape"}
    assert descs["app.Subclass"].source_file == os.path.join("app", "Subclass.java")
