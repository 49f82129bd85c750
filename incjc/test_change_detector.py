import hashlib
import os
import pytest
import tempfile
from pathlib import Path
from incjc.change_detector import (
    compute_file_hash,
    detect_changes,
    find_all_class_files,
    find_all_sources,
    find_changed_and_new_sources,
)
from incjc.exceptions import SourceDiscoveryError

@pytest.fixture
def source_tree():
    """Create a small source tree with a nested package"""
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        (root / "app" / "util").mkdir(parents=True)
        (root / "app" / "Main.java").write_text("class Main {}")
        (root / "app" / "util" / "Strings.java").write_text("class Strings {}")
        (root / "app" / "notes.txt").write_text("not a source")
        (root / "app" / "Main.class").write_bytes(b"\xca\xfe\xba\xbe")
        yield root

def test_compute_file_hash_is_sha256_of_bytes(source_tree):
    path = source_tree / "app" / "Main.java"

    assert compute_file_hash(path) == hashlib.sha256(b"class Main {}").hexdigest()

def test_compute_file_hash_of_missing_file_raises(source_tree):
    with pytest.raises(SourceDiscoveryError):
        compute_file_hash(source_tree / "Missing.java")

def test_find_all_sources_recurses(source_tree):
    sources = find_all_sources(str(source_tree))

    assert sources == {
        os.path.join(str(source_tree), "app", "Main.java"),
        os.path.join(str(source_tree), "app", "util", "Strings.java"),
    }

def test_find_all_sources_requires_directory(source_tree):
    with pytest.raises(SourceDiscoveryError):
        find_all_sources(str(source_tree / "missing"))

def test_find_all_class_files(source_tree):
    assert find_all_class_files(source_tree) == {os.path.join(str(source_tree), "app", "Main.class")}

def test_unchanged_sources_are_not_reported(source_tree):
    sources = find_all_sources(str(source_tree))
    hashes = {src: compute_file_hash(Path(src)) for src in sources}

    assert find_changed_and_new_sources(sources, hashes) == {}

def test_changed_and_new_sources_are_reported(source_tree):
    sources = find_all_sources(str(source_tree))
    main = os.path.join(str(source_tree), "app", "Main.java")
    strings = os.path.join(str(source_tree), "app", "util", "Strings.java")
    hashes = {main: compute_file_hash(Path(main))}
    Path(main).write_text("class Main { int x; }")

    changed = find_changed_and_new_sources(sources, hashes)

    assert set(changed) == {main, strings}
    assert changed[main] == compute_file_hash(Path(main))

def test_touch_without_content_change_is_not_a_change(source_tree):
    main = os.path.join(str(source_tree), "app", "Main.java")
    hashes = {main: compute_file_hash(Path(main))}
    os.utime(main, (0, 0))

    assert find_changed_and_new_sources({main}, hashes) == {}

def test_detect_changes_reports_deletions(source_tree):
    sources = find_all_sources(str(source_tree))
    hashes = {src: compute_file_hash(Path(src)) for src in sources}
    hashes["/gone/Old.java"] = "abc"

    changes = detect_changes(sources, hashes)

    assert changes.changed == {}
    assert changes.deleted == {"/gone/Old.java"}
    assert changes.seed == {"/gone/Old.java"}
    assert changes
