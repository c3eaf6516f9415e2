import io

import pytest

from minishell.heredoc import (
    DEFAULT_PATH,
    PROMPT,
    HeredocInterrupted,
    heredoc_path,
    read_heredoc,
    write_heredoc,
)


class _InterruptingSource:
    def readline(self):
        raise KeyboardInterrupt


def test_heredoc_path_without_tty():
    assert heredoc_path(None) == "/tmp/heredoc_defoult"
    assert heredoc_path(None) == DEFAULT_PATH


def test_heredoc_path_without_slash_uses_default():
    assert heredoc_path("console") == DEFAULT_PATH


def test_heredoc_path_uses_terminal_name():
    assert heredoc_path("/dev/pts/3") == "/tmp/heredoc" + "3"


def test_read_heredoc_expands_and_stops():
    prompt = io.StringIO()
    body = read_heredoc("EOF", ["NAME=world"], io.StringIO("hello $NAME\nEOF\nafter\n"), prompt)
    assert body == "hello world\n"
    assert prompt.getvalue() == PROMPT * 2


def test_read_heredoc_prompt_text():
    prompt = io.StringIO()
    read_heredoc("END", [], io.StringIO("END\n"), prompt)
    assert prompt.getvalue() == "heredoc> "


def test_read_heredoc_status_is_zero():
    body = read_heredoc("EOF", [], io.StringIO("$?\nEOF\n"), io.StringIO())
    assert body == "0\n"


def test_read_heredoc_delimiter_must_match_whole_line():
    body = read_heredoc("EOF", [], io.StringIO("EOFX\n EOF\nEOF\n"), io.StringIO())
    assert body == "EOFX\n EOF\n"


def test_read_heredoc_end_of_input():
    with pytest.raises(HeredocInterrupted) as info:
        read_heredoc("EOF", [], io.StringIO("line\n"), io.StringIO())
    assert info.value.status == 1


def test_read_heredoc_delimiter_without_newline_at_end():
    with pytest.raises(HeredocInterrupted) as info:
        read_heredoc("EOF", [], io.StringIO("line\nEOF"), io.StringIO())
    assert info.value.status == 1


def test_read_heredoc_interrupted():
    prompt = io.StringIO()
    with pytest.raises(HeredocInterrupted) as info:
        read_heredoc("EOF", [], _InterruptingSource(), prompt)
    assert info.value.status == 130
    assert prompt.getvalue().endswith("\n")


def test_write_heredoc_writes_file(tmp_path):
    target = tmp_path / "doc"
    target.write_text("old contents\n")
    result = write_heredoc(target, "EOF", ["A=1"], io.StringIO("a=$A\nb\nEOF\n"), io.StringIO())
    assert result == target
    assert target.read_text() == "a=1\nb\n"


def test_write_heredoc_keeps_partial_on_failure(tmp_path):
    target = tmp_path / "doc"
    with pytest.raises(HeredocInterrupted):
        write_heredoc(target, "EOF", [], io.StringIO("first\n"), io.StringIO())
    assert target.read_text() == "first\n"


def test_write_heredoc_round_trip(tmp_path):
    text = "one\ntwo $\nthree\n"
    target = write_heredoc(tmp_path / "doc", "STOP", [], io.StringIO(text + "STOP\n"), io.StringIO())
    assert target.read_text() == read_heredoc("STOP", [], io.StringIO(text + "STOP\n"), io.StringIO())