from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from fakes import image_response, mock_client
from imgbench import cli


def _serve(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    monkeypatch.setattr(cli, "new_client", lambda: mock_client(handler))


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "MAX_CONCURRENT" in out
    assert "BASE_URL" in out


def test_bad_environment_aborts_before_testing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MAX_CONCURRENT", "many")
    assert cli.main(["--output-dir", str(tmp_path)]) == 1
    assert list(tmp_path.iterdir()) == []


def test_full_sweep_writes_summary(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"status": "ok"})
        return image_response(request)

    _serve(monkeypatch, handler)
    code = cli.main(["--max-concurrent", "2", "--cooldown", "0", "--output-dir", str(tmp_path)])
    assert code == 0
    out = capsys.readouterr().out
    assert "LOAD TEST SUMMARY" in out
    assert "REQUEST_2|SUCCESS" in out
    (run_dir,) = list(tmp_path.iterdir())
    assert (run_dir / "summary.csv").exists()
    meta = json.loads((run_dir / "run.json").read_text(encoding="utf-8"))
    assert meta["max_concurrency"] == 2
    assert len(list((run_dir / "level_02").iterdir())) == 2


def test_failing_requests_still_exit_zero(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _serve(monkeypatch, lambda request: httpx.Response(500, json={"detail": "overloaded"}))
    assert cli.main(["--max-concurrent", "1", "--cooldown", "0", "--output-dir", str(tmp_path)]) == 0


def test_strict_health_aborts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _serve(monkeypatch, lambda request: httpx.Response(503))
    args = ["--max-concurrent", "1", "--output-dir", str(tmp_path), "--strict-health"]
    assert cli.main(args) == 1
    (run_dir,) = list(tmp_path.iterdir())
    assert not (run_dir / "summary.csv").exists()


def test_invalid_base_url_aborts_before_testing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BASE_URL", "http://localhost:abc")
    assert cli.main(["--output-dir", str(tmp_path)]) == 1
    assert list(tmp_path.iterdir()) == []
