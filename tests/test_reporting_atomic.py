import pytest

from clubfinder.reporting import atomic_writer


def test_atomic_writer_replaces_file(tmp_path):
    path = tmp_path / "summary.txt"

    with atomic_writer(str(path)) as f:
        f.write("first")
    assert path.read_text(encoding="utf-8") == "first"

    with atomic_writer(str(path)) as f:
        f.write("second")
    assert path.read_text(encoding="utf-8") == "second"

    leftovers = [p for p in tmp_path.iterdir() if p.name != "summary.txt"]
    assert not leftovers


def test_atomic_writer_keeps_old_file_on_error(tmp_path):
    path = tmp_path / "summary.txt"
    path.write_text("old", encoding="utf-8")

    with pytest.raises(RuntimeError):
        with atomic_writer(str(path)) as f:
            f.write("partial")
            raise RuntimeError("boom")

    assert path.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["summary.txt"]
