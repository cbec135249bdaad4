"""Shared pytest fixtures for payout export tests.

Tests run against an in-memory ledger (`helpers.ledger.FakeLedger`) or an
httpx `MockTransport` serving Stripe-shaped JSON; nothing touches the network.
Settings are isolated from the developer's environment and `.env` files by
running every test in its own temporary working directory.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.models import LogoConfig


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run each test in its own directory with no PAYOUT_REPORTS_* variables."""

    for key in list(os.environ):
        if key.startswith("PAYOUT_REPORTS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        api_key="sk_test_123",
        output_dir=tmp_path / "reports",
        log_dir=tmp_path / "logs",
        lastid_file=tmp_path / "lastid",
        logo_url="https://example.com/logo.png",
        logo_width="120px",
        logo_height=40,
    )


@pytest.fixture
def logo() -> LogoConfig:
    return LogoConfig(url="https://example.com/logo.png", width=120, height=40)
