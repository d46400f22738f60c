"""
Tests for the console entry point's top-level error handling.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from sekai_fetch import __main__ as entry
from sekai_fetch.cli import app as app_module
from sekai_fetch.exceptions import ConfigurationError, DownloadError, FetchError


def _raising(error: BaseException):
    def app() -> None:
        raise error

    return app


@pytest.fixture(autouse=True)
def config_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "cfg" / "config.ini"
    monkeypatch.setattr(app_module, "CONFIG_FILE", path)
    return path


class TestMain:
    @pytest.mark.parametrize(
        "error", [FetchError("offline"), ConfigurationError("bad"), RuntimeError("boom")]
    )
    def test_errors_exit_with_code_one(self, monkeypatch, capsys, error) -> None:
        monkeypatch.setattr(app_module, "app", _raising(error))

        with pytest.raises(SystemExit) as exc_info:
            entry.main()

        assert exc_info.value.code == 1
        assert type(error).__name__ in capsys.readouterr().out

    def test_keyboard_interrupt_exits_cleanly(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(app_module, "app", _raising(KeyboardInterrupt()))

        with pytest.raises(SystemExit) as exc_info:
            entry.main()

        assert exc_info.value.code == 0
        assert "Finished files are kept" in capsys.readouterr().out

    def test_successful_run_does_not_exit(self, monkeypatch) -> None:
        monkeypatch.setattr(app_module, "app", lambda: None)
        entry.main()


class TestErrorContext:
    def test_fetch_and_config_errors_name_the_config_file(self, config_file) -> None:
        assert entry._error_context(FetchError("x")) == {"config": str(config_file)}
        assert entry._error_context(ConfigurationError("x")) == {
            "config": str(config_file)
        }

    def test_other_errors_have_no_context(self) -> None:
        assert entry._error_context(DownloadError("x")) is None
