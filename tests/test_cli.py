from __future__ import annotations

import pytest

import scripts.create_rollup_custom_fee_token as cli
from orbit_custom_fee_rollup.errors import DeploymentFailed, MissingRequiredConfig
from orbit_custom_fee_rollup.orchestrator import OrchestrationReport, PhaseResult


def test_cli_exits_non_zero_on_missing_config(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    def fake_initialize():
        raise MissingRequiredConfig("DEPLOYER_PRIVATE_KEY")

    def fail_run(_context):
        raise AssertionError("run must not be reached")

    monkeypatch.setattr(cli, "initialize", fake_initialize)
    monkeypatch.setattr(cli, "run", fail_run)

    assert cli.main([]) == 1
    assert 'Please provide the "DEPLOYER_PRIVATE_KEY" environment variable' in caplog.text


def test_cli_exits_zero_even_when_phases_fail(monkeypatch: pytest.MonkeyPatch) -> None:
    context = object()
    seen = []

    def fake_run(ctx):
        seen.append(ctx)
        failed = PhaseResult(phase="deployment", ok=False, error=DeploymentFailed(RuntimeError("boom")))
        return OrchestrationReport(deployment=failed, keyset=failed)

    monkeypatch.setattr(cli, "initialize", lambda: context)
    monkeypatch.setattr(cli, "run", fake_run)

    assert cli.main(["--log-level", "debug"]) == 0
    assert seen == [context]
