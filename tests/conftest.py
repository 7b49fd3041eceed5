from __future__ import annotations

from io import BytesIO
from typing import TYPE_CHECKING

import pytest
from PIL import Image

from geofacts.domain.reconciliation import (
    AliasTable,
    DiagnosticsReport,
    ReconciliationEngine,
    SourceSnapshot,
)
from tests.support.records import alias_table, nordic_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def aliases() -> AliasTable:
    return alias_table()


@pytest.fixture
def diagnostics() -> DiagnosticsReport:
    return DiagnosticsReport()


@pytest.fixture
def snapshot() -> SourceSnapshot:
    return nordic_snapshot()


@pytest.fixture
def engine(aliases: AliasTable, diagnostics: DiagnosticsReport) -> ReconciliationEngine:
    return ReconciliationEngine(aliases=aliases, diagnostics=diagnostics)


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    def factory(
        width: int = 40, height: int = 20, color: tuple[int, int, int] = (200, 30, 30)
    ) -> bytes:
        buffer = BytesIO()
        Image.new("RGB", (width, height), color).save(buffer, format="PNG")
        return buffer.getvalue()

    return factory


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    for name in (
        "GEOFACTS_LOG_LEVEL",
        "GEOFACTS_OUTPUT_DIR",
        "GEOFACTS_ALIASES",
        "GEOFACTS_MAX_CONCURRENCY",
        "GEOFACTS_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEOFACTS_DATA_DIR", str(tmp_path_factory.mktemp("data")))
