import logging

import pytest
from rich.logging import RichHandler

from flagrouter.utils import get_program_name, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_cli_mode(tmp_path):
    setup_logging(mode="cli", log_filename=str(tmp_path / "flagrouter.log"))
    handlers = logging.getLogger().handlers
    assert isinstance(handlers[0], RichHandler)
    assert isinstance(handlers[1], logging.FileHandler)


def test_json_mode_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FLAGROUTER_LOG_MODE", "json")
    log_file = tmp_path / "flagrouter.log"
    setup_logging(log_filename=str(log_file), json_log_to_file=True)

    handlers = logging.getLogger().handlers
    assert not isinstance(handlers[0], RichHandler)

    logging.getLogger("flagrouter").info("hello")
    handlers[1].flush()
    assert '"message": "hello"' in log_file.read_text()


def test_no_file_handler():
    setup_logging(mode="cli", log_filename=None)
    assert len(logging.getLogger().handlers) == 1


def test_invalid_mode():
    with pytest.raises(ValueError, match="Invalid log mode"):
        setup_logging(mode="xml", log_filename=None)


def test_get_program_name(monkeypatch):
    monkeypatch.setattr("sys.argv", ["/does/not/exist/tool.py", "--flag"])
    assert get_program_name() == "tool.py"
