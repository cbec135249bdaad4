"""CLI tests: commands run end to end against a mocked ledger API."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

import cli.main as cli_main
from adapters.http_client import build_async_client
from cli.main import LASTID_FROM_FILE, app, normalize_lastid_args
from core.config import write_user_env_vars

runner = CliRunner()

DAY = 86_400
BASE = 1_709_294_400


def _payout(index: int) -> dict:
    return {
        "id": f"po_{index:03d}",
        "object": "payout",
        "amount": 10_000 + index,
        "currency": "usd",
        "created": BASE + index * DAY,
        "status": "paid",
    }


class FakeStripeApi:
    """Just enough of `/v1/payouts` and `/v1/balance_transactions`."""

    def __init__(self, count: int = 3) -> None:
        self.payouts = [_payout(i) for i in range(count, 0, -1)]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/payouts":
            items = self.payouts
            if "created[gte]" in request.url.params:
                since = int(request.url.params["created[gte]"])
                items = [p for p in items if p["created"] >= since]
            start = 0
            if "starting_after" in request.url.params:
                ids = [p["id"] for p in items]
                start = ids.index(request.url.params["starting_after"]) + 1
            limit = int(request.url.params.get("limit", 100))
            chunk = items[start : start + limit]
            return httpx.Response(200, json={"data": chunk, "has_more": start + limit < len(items)})
        if path.startswith("/v1/payouts/"):
            payout_id = path.rsplit("/", 1)[-1]
            for payout in self.payouts:
                if payout["id"] == payout_id:
                    return httpx.Response(200, json=payout)
            return httpx.Response(404, json={"error": {"message": f"No such payout: '{payout_id}'"}})
        if path == "/v1/balance_transactions":
            data = [
                {
                    "id": "txn_1",
                    "amount": 5000,
                    "fee": 175,
                    "net": 4825,
                    "currency": "usd",
                    "created": BASE,
                    "description": "Invoice payment",
                    "source": {"statement_descriptor": "INV-1"},
                }
            ]
            return httpx.Response(200, json={"data": data, "has_more": False})
        return httpx.Response(404, json={"error": {"message": "unknown route"}})


@pytest.fixture
def api(monkeypatch) -> FakeStripeApi:
    fake = FakeStripeApi()
    monkeypatch.setenv("PAYOUT_REPORTS_API_KEY", "sk_test_cli")
    monkeypatch.setattr(
        cli_main,
        "build_async_client",
        lambda settings: build_async_client(settings, transport=httpx.MockTransport(fake)),
    )
    return fake


def _invoke(*args: str):
    return runner.invoke(app, normalize_lastid_args(list(args)))


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["export", "--lastid"], ["export", "--lastid", LASTID_FROM_FILE]),
        (["export", "--lastid", "--format", "pdf"], ["export", "--lastid", LASTID_FROM_FILE, "--format", "pdf"]),
        (["export", "--lastid", "po_9"], ["export", "--lastid", "po_9"]),
        (["export", "po_1"], ["export", "po_1"]),
    ],
)
def test_normalize_lastid_args(argv, expected):
    assert normalize_lastid_args(argv) == expected


def test_list_prints_payouts(api):
    result = _invoke("list")

    assert result.exit_code == 0, result.output
    assert "Found 3 payouts:" in result.output
    assert "po_003" in result.output
    assert api.requests[0].headers["Authorization"] == "Bearer sk_test_cli"


def test_list_with_limit(api):
    result = _invoke("list", "--limit", "2")

    assert result.exit_code == 0, result.output
    assert api.requests[0].url.params["limit"] == "2"


def test_list_without_api_key_fails():
    result = _invoke("list")

    assert result.exit_code == 1
    assert "No API key configured" in result.output


def test_view_shows_payout_and_transactions(api):
    result = _invoke("view", "po_002")

    assert result.exit_code == 0, result.output
    assert "Payout Details" in result.output
    assert "po_002" in result.output
    assert "Related Transactions (1)" in result.output


def test_view_requires_an_id(api):
    result = _invoke("view")

    assert result.exit_code == 1
    assert 'Payout ID is required for "view" command.' in result.output


def test_view_unknown_payout_exits_1(api):
    result = _invoke("view", "po_missing")

    assert result.exit_code == 1
    assert "Payout Details" not in result.output


def test_export_requires_id_or_lastid(api):
    result = _invoke("export")

    assert result.exit_code == 1
    assert 'Payout ID or --lastid is required for "export" command.' in result.output


def test_export_rejects_unknown_format(api):
    result = _invoke("export", "po_001", "--format", "docx")

    assert result.exit_code == 1
    assert "--format must be html, pdf, or json." in result.output
    assert api.requests == []


def test_bare_lastid_without_file_exits_1(api):
    result = _invoke("export", "--lastid")

    assert result.exit_code == 1
    assert "no lastid file exists" in result.output


def test_export_explicit_ids_writes_reports_and_log(api, tmp_path):
    result = _invoke("export", "po_001", "po_002", "--format", "json", "--outdir", "out", "--log", "export.log")

    assert result.exit_code == 0, result.output
    assert "Generated JSON report for payout po_001" in result.output
    assert (tmp_path / "out" / "payout_po_001.json").exists()
    assert (tmp_path / "out" / "payout_po_002.json").exists()
    log_text = (tmp_path / "export.log").read_text(encoding="utf-8")
    assert "[INFO]: Generated JSON report for payout po_002" in log_text
    assert not Path("lastid").exists()


def test_export_continues_from_lastid_file(api, tmp_path):
    Path("lastid").write_text("po_001\n", encoding="utf-8")

    result = _invoke("export", "--lastid", "--format", "html")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "payout_reports" / "payout_po_002.html").exists()
    assert (tmp_path / "payout_reports" / "payout_po_003.html").exists()
    assert Path("lastid").read_text(encoding="utf-8") == "po_003\npo_001\n"
    assert list((tmp_path / "logs").glob("export-*.log"))


def test_export_with_explicit_lastid_value(api, tmp_path):
    result = _invoke("export", "--lastid", "po_002", "--format", "pdf", "--outdir", "pdfs")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "pdfs" / "payout_po_003.pdf").read_bytes().startswith(b"%PDF")
    assert not (tmp_path / "pdfs" / "payout_po_002.pdf").exists()
    assert Path("lastid").read_text(encoding="utf-8") == "po_003\n"


def test_export_per_payout_failure_still_exits_0(api, tmp_path):
    result = _invoke("export", "po_missing", "po_001", "--format", "json")

    assert result.exit_code == 0, result.output
    assert "1 payout(s) failed" in result.output
    assert (tmp_path / "payout_reports" / "payout_po_001.json").exists()


def test_continuation_resolution_failure_exits_1(api):
    result = _invoke("export", "--lastid", "po_missing")

    assert result.exit_code == 1
    assert not Path("lastid").exists()


def test_doctor_without_api_key_still_reports(tmp_path):
    result = _invoke("doctor", "run")

    assert result.exit_code == 0, result.output
    assert "Doctor" in result.output
    assert (tmp_path / "payout_reports").is_dir()


def test_doctor_set_key_writes_user_env(monkeypatch, tmp_path):
    env_path = tmp_path / "config" / ".env"
    monkeypatch.setattr(
        "cli.doctor.write_user_env_vars",
        lambda values: write_user_env_vars(values, env_path=env_path),
    )

    result = runner.invoke(app, ["doctor", "set-key"], input="sk_live_abc\n\n")

    assert result.exit_code == 0, result.output
    assert "PAYOUT_REPORTS_API_KEY=sk_live_abc" in env_path.read_text(encoding="utf-8")


def test_invalid_default_format_setting_exits_1(api, monkeypatch):
    monkeypatch.setenv("PAYOUT_REPORTS_DEFAULT_FORMAT", "docx")

    result = _invoke("export", "po_001")

    assert result.exit_code == 1
    assert "must be html, pdf, or json." in result.output
    assert api.requests == []


def test_truncated_continuation_listing_exits_1(api, monkeypatch, tmp_path):
    monkeypatch.setenv("PAYOUT_REPORTS_PAGE_SIZE", "1")
    monkeypatch.setenv("PAYOUT_REPORTS_MAX_PAGES", "1")

    result = _invoke("export", "--lastid", "po_001", "--format", "json")

    assert result.exit_code == 1
    assert not Path("lastid").exists()
    assert not list((tmp_path / "payout_reports").glob("*.json"))
