"""Tests for ttr.log: leveled messages on stderr."""

from __future__ import annotations

import pytest

from ttr import log


@pytest.fixture(autouse=True)
def _reset_verbose():
    yield
    log.set_verbose(False)


def test_debug_hidden_unless_verbose(capsys):
    log.debug("discovering")
    assert capsys.readouterr().err == ""

    log.set_verbose(True)
    log.debug("discovering")
    assert "[DEBUG] discovering" in capsys.readouterr().err


def test_error_with_hint_goes_to_stderr(capsys):
    log.error("bad file", hint="fix it")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[ERROR] bad file" in captured.err
    assert "fix it" in captured.err


def test_messages_are_not_parsed_as_markup(capsys):
    log.warn("key [q] is reserved")
    assert "key [q] is reserved" in capsys.readouterr().err
