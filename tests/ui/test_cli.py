from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest

from geofacts.config import ConfigurationError
from geofacts.domain.reconciliation import DiagnosticsReport
from geofacts.errors import SourceUnavailable
from geofacts.ui import cli as cli_module

if TYPE_CHECKING:
    from collections.abc import Callable


def _fake_collect(captured: dict[str, object]) -> Callable[..., SimpleNamespace]:
    def fake_collect(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(diagnostics=DiagnosticsReport())

    return fake_collect


def test_collect_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    monkeypatch.setattr(cli_module, "collect", _fake_collect(captured))

    cli_module.main(["collect"])

    assert captured == {
        "output_dir": None,
        "aliases_path": None,
        "max_concurrency": None,
        "border_width": 2,
        "with_flags": True,
    }


def test_collect_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    monkeypatch.setattr(cli_module, "collect", _fake_collect(captured))

    cli_module.main(
        [
            "--verbose",
            "collect",
            "--output",
            "out",
            "--aliases",
            "input/countries.json",
            "--max-concurrency",
            "8",
            "--border-width",
            "0",
            "--no-flags",
        ]
    )

    assert captured["output_dir"] == Path("out")
    assert captured["aliases_path"] == Path("input/countries.json")
    assert captured["max_concurrency"] == 8
    assert captured["border_width"] == 0
    assert captured["with_flags"] is False


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["collect", "--max-concurrency", "0"],
        ["collect", "--border-width", "-1"],
        ["collect", "--border-width", "wide"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, argv: list[str]
) -> None:
    monkeypatch.setattr(cli_module, "collect", _fake_collect({}))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigurationError("Alias table not found"), 2),
        (SourceUnavailable("regions", "HTTP 503"), 1),
        (RuntimeError("boom"), 1),
    ],
)
def test_errors_map_to_exit_codes(
    monkeypatch: pytest.MonkeyPatch, error: Exception, code: int
) -> None:
    def failing_collect(**_: object) -> None:
        raise error

    monkeypatch.setattr(cli_module, "collect", failing_collect)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["collect"])

    assert excinfo.value.code == code


def test_sigint_handler_exits_cleanly() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.sigint_handler(2, None)

    assert excinfo.value.code == 0
