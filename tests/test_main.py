"""Tests for the console entry point and its exit codes."""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from mapshot import config
from mapshot.error_handler import NavigationTimeoutError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith('MAPSHOT_'):
            monkeypatch.delenv(key)
    monkeypatch.setattr(config, 'load_dotenv', lambda *args, **kwargs: False)


def test_success_exits_cleanly(monkeypatch, capsys):
    async def fake_main(plan):
        return []

    monkeypatch.setattr(main, 'main', fake_main)
    main.run()

    assert "✅ Capture completed!" in capsys.readouterr().out


def test_capture_failure_exits_1(monkeypatch, capsys):
    async def fake_main(plan):
        raise NavigationTimeoutError("Navigation to https://palia.th.gl/ timed out")

    monkeypatch.setattr(main, 'main', fake_main)
    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "❌" in err
    assert "timed out" in err


def test_interrupt_exits_130(monkeypatch, capsys):
    def interrupted(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setattr(main.asyncio, 'run', interrupted)
    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 130
    assert "🛑" in capsys.readouterr().err


def test_bad_configuration_exits_1_before_launching(monkeypatch, capsys):
    launched = []

    async def fake_main(plan):
        launched.append(plan)

    monkeypatch.setenv('MAPSHOT_MAX_ATTEMPTS', '0')
    monkeypatch.setattr(main, 'main', fake_main)
    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert launched == []
    err = capsys.readouterr().err
    assert "❌ Configuration error" in err
    assert "MAPSHOT_MAX_ATTEMPTS" in err
