import io
import logging

import pytest

from securebox.logging_config import resolve_level, setup_logging


def test_handlers_replaced_on_second_call(tmp_path):
    setup_logging(logging.DEBUG)
    logger = setup_logging("debug", log_file=str(tmp_path / "a.log"))
    assert logger is logging.getLogger("securebox")
    assert len(logger.handlers) == 2
    logging.getLogger("securebox.solver").debug("hello from solver")
    for handler in logger.handlers:
        handler.flush()
    text = (tmp_path / "a.log").read_text(encoding="utf-8")
    assert "securebox.solver - DEBUG - hello from solver" in text


def test_explicit_stream_and_level_filter():
    stream = io.StringIO()
    setup_logging("warning", stream=stream)
    logging.getLogger("securebox.cli").info("quiet")
    logging.getLogger("securebox.cli").warning("loud")
    assert "quiet" not in stream.getvalue()
    assert "securebox.cli - WARNING - loud" in stream.getvalue()


def test_resolve_level():
    assert resolve_level("Info") == logging.INFO
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("chatty")
