import re
from datetime import datetime

from picam.log_writer import DescriptionLog, format_record


def test_format_record():
    when = datetime(2024, 5, 1, 12, 30, 45)
    assert format_record("A cat.", when) == "2024-05-01 12:30:45: A cat."


def test_multiline_description_becomes_one_line():
    when = datetime(2024, 5, 1, 12, 30, 45)
    assert format_record("A cat\non a mat.\n", when) == "2024-05-01 12:30:45: A cat on a mat."


def test_append_keeps_existing_lines(tmp_path):
    path = tmp_path / "output.txt"
    path.write_text("2024-01-01 00:00:00: earlier\n", encoding="utf-8")

    log = DescriptionLog(path)
    log.append("first")
    log.append("second")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "2024-01-01 00:00:00: earlier"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}: first", lines[1])
    assert lines[2].endswith(": second")
    assert len(lines) == 3


def test_creates_parent_directories_and_writes_utf8(tmp_path):
    path = tmp_path / "logs" / "output.txt"
    line = DescriptionLog(path).append("Un café ☕")
    assert path.read_text(encoding="utf-8") == line + "\n"
