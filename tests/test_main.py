import json
import logging

import pytest

from kv_storage import __version__
from kv_storage.__main__ import main


def test_version_flag_prints_version_and_exits(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_show_config_prints_resolved_configuration(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("KV_STORAGE_BACKEND", "redis")
    monkeypatch.setenv("KV_STORAGE_REDIS_URL", "redis://cache:6379/2")

    main(["--show-config"])

    shown = json.loads(capsys.readouterr().out)
    assert shown["backend"] == "redis"
    assert shown["redis"]["url"] == "redis://cache:6379/2"


def test_no_arguments_prints_nothing(capsys: pytest.CaptureFixture[str]) -> None:
    main([])
    assert capsys.readouterr().out == ""


def test_verbose_enables_debug_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs["level"]))

    main(["--verbose"])
    assert calls == [logging.DEBUG]
