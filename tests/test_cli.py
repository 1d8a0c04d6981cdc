"""CLI smoke tests with an offline snapshot session."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from adapters.snapshot_session import SnapshotSession
from cli.main import app, run_dump
from core.config import AppSettings
from core.errors import DumpAborted, FilterServiceUnavailable
from core.services.dump_pipeline import DumpRequest

KEY = "0123456789ABCDEF" * 4


@pytest.fixture
def snapshot(tmp_path: Path) -> Path:
    data = {
        "account": "alice",
        "licenses": [1],
        "packages": {"1": {"token": 0, "info": {"appids": {"0": 100}, "depotids": {"0": 200}}}},
        "apps": {
            "100": {
                "token": 123,
                "info": {
                    "common": {"name": "Spacewar", "releasestate": "released"},
                    "depots": {"200": {"manifests": {"public": {"gid": "55"}}}},
                },
            }
        },
        "depot_keys": {"200": KEY},
    }
    path = tmp_path / "alice.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPOT_DUMPER_KNOWN_DEPOTS_API_KEY", raising=False)
    monkeypatch.delenv("DEPOT_DUMPER_OUTPUT_DIR", raising=False)


def test_dump_account_from_snapshot(snapshot: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"

    result = CliRunner().invoke(
        app, ["dump", "--snapshot", str(snapshot), "--output-dir", str(out), "--no-banner"]
    )

    assert result.exit_code == 0, result.output
    assert "Dumped: 1 depot keys" in result.output
    assert (out / "alice_keys.txt").read_text(encoding="utf-8") == f"200;{KEY}\n"
    assert (out / "alice_pkgs.txt").read_text(encoding="utf-8") == "1;0\n"
    assert (out / "alice_appnames.txt").read_text(encoding="utf-8") == (
        "100 - Spacewar\n\t200\n\t\tpublic - 55\n"
    )


def test_dump_single_app_from_snapshot(snapshot: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"

    result = CliRunner().invoke(
        app,
        ["dump", "--snapshot", str(snapshot), "--app", "100", "--output-dir", str(out), "--no-banner"],
    )

    assert result.exit_code == 0, result.output
    assert (out / "app_100_token.txt").read_text(encoding="utf-8") == "100;123\n"
    assert (out / "app_100_keys.txt").read_text(encoding="utf-8") == f"200;{KEY}\n"
    assert not (out / "alice_pkgs.txt").exists()


def test_invalid_snapshot_exits_with_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{}", encoding="utf-8")

    result = CliRunner().invoke(app, ["dump", "--snapshot", str(broken), "--no-banner"])

    assert result.exit_code == 1


def test_username_or_snapshot_is_required() -> None:
    result = CliRunner().invoke(app, ["dump", "--no-banner"])

    assert result.exit_code != 0


def test_known_depot_lookup_runs_before_the_session_is_opened(snapshot: Path, tmp_path: Path) -> None:
    events: list[str] = []
    request = DumpRequest()

    async def fetch(key: str) -> frozenset[int]:
        events.append("lookup")
        return frozenset({200})

    def open_session() -> SnapshotSession:
        events.append("session")
        return SnapshotSession(path=snapshot)

    summary = asyncio.run(
        run_dump(
            open_session=open_session,
            settings=AppSettings(),
            request=request,
            api_key="secret",
            decide=lambda exc: False,
            output_dir=tmp_path / "out",
            fetch=fetch,
        )
    )

    assert events == ["lookup", "session"]
    assert summary.filter_active and summary.skipped == 1
    assert request.existing_depots is None


def test_abort_on_lookup_failure_never_opens_a_session(tmp_path: Path) -> None:
    async def fetch(key: str) -> frozenset[int]:
        raise FilterServiceUnavailable("down")

    def open_session() -> SnapshotSession:
        raise AssertionError("credentials must not be requested after an abort")

    with pytest.raises(DumpAborted):
        asyncio.run(
            run_dump(
                open_session=open_session,
                settings=AppSettings(),
                request=DumpRequest(),
                api_key="secret",
                decide=lambda exc: False,
                output_dir=tmp_path,
                fetch=fetch,
            )
        )
