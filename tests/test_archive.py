import io
import zipfile

from core.archive import archive_entry_name, build_archive, write_archive
from core.pipeline import BubbleResults


def _names(archive_bytes):
    with zipfile.ZipFile(io.BytesIO(archive_bytes)) as archive:
        return archive.namelist()


def test_entry_names_are_one_based():
    assert archive_entry_name(0) == "bubble_1.png"
    assert archive_entry_name(9) == "bubble_10.png"
    assert archive_entry_name(1, "speech_{number:03d}.png") == "speech_002.png"


def test_unresolved_entries_are_skipped():
    archive_bytes = build_archive({2: b"c", 0: b"a", 1: None})
    assert _names(archive_bytes) == ["bubble_1.png", "bubble_3.png"]


def test_archive_contents_match_results():
    results = BubbleResults(count=2)
    results.set(1, b"second")
    results.set(0, b"first")

    with zipfile.ZipFile(io.BytesIO(build_archive(results))) as archive:
        assert archive.namelist() == ["bubble_1.png", "bubble_2.png"]
        assert archive.read("bubble_2.png") == b"second"


def test_empty_results_give_empty_archive():
    assert _names(build_archive({})) == []


def test_write_archive_creates_parent_dirs(tmp_path):
    target = tmp_path / "nested" / "bubbles.zip"
    written = write_archive([(0, b"png")], target)

    assert written == target
    assert _names(target.read_bytes()) == ["bubble_1.png"]
