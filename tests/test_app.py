# tests/test_app.py
"""
Entry Point Tests - Single-instance PID Lock and Logging Setup
"""
import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from parkchain.app import _acquire_instance_lock, _get_pid_file, _release_instance_lock
from parkchain.shared.logging_conf import setup_logging


class TestInstanceLock:
    def test_pid_file_location(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PARKCHAIN_PID_FILE", raising=False)
        assert _get_pid_file(tmp_path) == tmp_path / "bot.pid"

        monkeypatch.setenv("PARKCHAIN_PID_FILE", str(tmp_path / "custom.pid"))
        assert _get_pid_file(tmp_path) == tmp_path / "custom.pid"

    def test_acquire_and_release(self, tmp_path):
        pid_file = tmp_path / "run" / "bot.pid"
        _acquire_instance_lock(pid_file)
        assert pid_file.read_text() == str(os.getpid())

        _release_instance_lock(pid_file)
        assert not pid_file.exists()
        _release_instance_lock(pid_file)

    def test_live_instance_blocks(self, tmp_path):
        pid_file = tmp_path / "bot.pid"
        pid_file.write_text(str(os.getpid()))
        with pytest.raises(RuntimeError, match="already running"):
            _acquire_instance_lock(pid_file)

    def test_garbage_pid_file_is_replaced(self, tmp_path):
        pid_file = tmp_path / "bot.pid"
        pid_file.write_text("not-a-pid")
        _acquire_instance_lock(pid_file)
        assert pid_file.read_text() == str(os.getpid())


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_log_dir_takes_precedence(self, tmp_path, restore_root_logging):
        path = setup_logging(log_file=str(tmp_path / "ignored.log"), log_dir=str(tmp_path / "logs"),
                             log_to_stdout=False)
        assert path == tmp_path / "logs" / "parkchain.log"
        assert any(isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers)

        logging.getLogger("parkchain.test").info("hello")
        assert "hello" in path.read_text(encoding="utf-8")

    def test_stdout_only(self, restore_root_logging):
        assert setup_logging() is None
