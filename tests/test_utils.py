import pytest

from argonode.core.errors import PollTimeoutError
from argonode.core.utils import mask_secret, poll_until, read_text, remove_files, safe_b64decode, write_text_atomic


class TestPollUntil:

    def test_returns_first_value(self):
        values = iter([None, None, "ready"])
        sleeps = []
        assert poll_until(lambda: next(values), attempts=5, sleep=sleeps.append) == "ready"
        assert sleeps == [1.0, 1.0]

    def test_exhaustion_raises_with_attempt_count(self):
        calls = []
        sleeps = []

        def probe():
            calls.append(1)
            return None

        with pytest.raises(PollTimeoutError) as exc_info:
            poll_until(probe, attempts=4, interval=0.5, sleep=sleeps.append, what="thing")
        assert len(calls) == 4
        assert sleeps == [0.5, 0.5, 0.5]
        assert exc_info.value.attempts == 4
        assert "Failed to get thing after 4 attempts" in str(exc_info.value)

    def test_falsy_values_other_than_none_count_as_ready(self):
        assert poll_until(lambda: "", attempts=1, sleep=lambda _: None) == ""


def test_write_text_atomic_replaces_content(tmp_path):
    target = tmp_path / "sub.txt"
    target.write_text("old", encoding="utf-8")
    write_text_atomic(str(target), "new")
    assert target.read_text(encoding="utf-8") == "new"
    assert [p.name for p in tmp_path.iterdir()] == ["sub.txt"]


def test_write_text_atomic_missing_directory(tmp_path):
    with pytest.raises(OSError):
        write_text_atomic(str(tmp_path / "nope" / "sub.txt"), "data")


def test_read_text_missing_file(tmp_path):
    assert read_text(str(tmp_path / "boot.log")) is None


def test_remove_files_reports_only_removed(tmp_path):
    present = tmp_path / "web"
    present.write_text("x")
    removed = remove_files([str(present), str(tmp_path / "bot")])
    assert removed == [str(present)]
    assert not present.exists()


@pytest.mark.parametrize("value,expected", [
    ("", ""),
    ("short", "*****"),
    ("ba1bea2a-cbb7", "ba1bea2a*****"),
])
def test_mask_secret(value, expected):
    assert mask_secret(value) == expected


def test_safe_b64decode_restores_padding():
    assert safe_b64decode("aGk") == b"hi"
    assert safe_b64decode(" aGVsbG8= \n") == b"hello"
