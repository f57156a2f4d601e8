"""
Unit tests for campaign sequencing and crash recovery.
"""

import asyncio

import pytest

from src.core.errors import ConfigError
from src.crawler.campaign import CampaignSummary
from src.store.checkpoint import Checkpoint, CheckpointStore
from src.supervisor.restart import ABORTED, ADVANCED, COMPLETED, RETRY, RestartSupervisor

MODELS = ["X5", "5 Series", "i4"]


class ScriptedCampaign:
    """Campaign runner that raises the queued exceptions for a model, then succeeds."""

    def __init__(self, failures=None):
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.calls = []

    async def __call__(self, ctx):
        self.calls.append((ctx.model, ctx.retry_count))
        pending = self.failures.get(ctx.model)
        if pending:
            raise pending.pop(0)
        return CampaignSummary(model=ctx.model)


def _supervisor(config, campaign, **kwargs):
    store = CheckpointStore(config.data_dir / "checkpoint.json")
    return RestartSupervisor(config, campaign, models=MODELS, store=store, **kwargs), store


class TestRestartSupervisor:
    """Tests for RestartSupervisor.run."""

    def test_all_models_completed(self, config):
        """Every model runs once in order and the checkpoint resets."""
        campaign = ScriptedCampaign()
        supervisor, store = _supervisor(config, campaign)
        result = asyncio.run(supervisor.run())

        assert result.status == COMPLETED
        assert result.exit_code == 0
        assert [s.model for s in result.summaries] == MODELS
        assert campaign.calls == [("X5", 0), ("5 Series", 0), ("i4", 0)]
        assert store.load() == Checkpoint()

    def test_crash_retries_same_model(self, config):
        """A crash restarts the same model with an incremented retry count."""
        campaign = ScriptedCampaign({"5 Series": [RuntimeError("browser died")]})
        supervisor, _ = _supervisor(config, campaign)
        result = asyncio.run(supervisor.run())

        assert result.status == COMPLETED
        assert campaign.calls == [("X5", 0), ("5 Series", 0), ("5 Series", 1), ("i4", 0)]

    def test_retry_count_resets_on_advance(self, config):
        """The next model starts with a retry count of zero."""
        campaign = ScriptedCampaign({"X5": [RuntimeError("a"), RuntimeError("b")]})
        supervisor, _ = _supervisor(config, campaign)
        asyncio.run(supervisor.run())
        assert ("5 Series", 0) in campaign.calls

    def test_aborts_after_max_retries(self, config):
        """Crashing once the retry count hits the limit aborts the run."""
        config.max_process_retries = 3
        campaign = ScriptedCampaign({"X5": [RuntimeError("boom")] * 10})
        supervisor, store = _supervisor(config, campaign)
        result = asyncio.run(supervisor.run())

        assert result.status == ABORTED
        assert result.exit_code == 1
        assert campaign.calls == [("X5", 0), ("X5", 1), ("X5", 2), ("X5", 3)]
        assert store.load() == Checkpoint()
        log = (config.audit_dir / "X5" / "restart_log.txt").read_text("utf-8")
        assert "Restarting due to: boom" in log
        assert "Aborted" in log

    def test_config_error_aborts_immediately(self, config):
        """A ConfigError is never retried."""
        campaign = ScriptedCampaign({"5 Series": [ConfigError("no selectors")]})
        supervisor, _ = _supervisor(config, campaign)
        result = asyncio.run(supervisor.run())

        assert result.status == ABORTED
        assert campaign.calls == [("X5", 0), ("5 Series", 0)]
        assert "no selectors" in result.error

    def test_resumes_from_checkpoint(self, config):
        """A persisted checkpoint picks up at its model and retry count."""
        campaign = ScriptedCampaign()
        supervisor, store = _supervisor(config, campaign)
        store.save(Checkpoint(model_index=1, retry_count=2))
        asyncio.run(supervisor.run())
        assert campaign.calls == [("5 Series", 2), ("i4", 0)]

    def test_out_of_range_checkpoint_restarts(self, config):
        campaign = ScriptedCampaign()
        supervisor, store = _supervisor(config, campaign)
        store.save(Checkpoint(model_index=7, retry_count=0))
        asyncio.run(supervisor.run())
        assert campaign.calls[0] == ("X5", 0)

    def test_no_models_is_config_error(self, config):
        config.campaign_models = []
        supervisor = RestartSupervisor(config, ScriptedCampaign())
        with pytest.raises(ConfigError):
            asyncio.run(supervisor.run())

    def test_run_toggles_reach_context(self, config):
        """dry_run, max_pages and audit flow into every RunContext."""
        seen = []

        async def campaign(ctx):
            seen.append((ctx.dry_run, ctx.max_pages, ctx.audit_enabled))
            return CampaignSummary(model=ctx.model)

        supervisor, _ = _supervisor(config, campaign, dry_run=True, max_pages=2, audit=True)
        asyncio.run(supervisor.run())
        assert seen == [(True, 2, True)] * 3


class TestSingleCampaignMode:
    """Tests for the one-campaign-per-process mode."""

    def test_advances_one_model(self, config):
        campaign = ScriptedCampaign()
        supervisor, store = _supervisor(config, campaign, single_campaign=True)
        result = asyncio.run(supervisor.run())

        assert result.status == ADVANCED
        assert result.exit_code == 0
        assert campaign.calls == [("X5", 0)]
        assert store.load() == Checkpoint(model_index=1, retry_count=0)

    def test_crash_persists_retry(self, config):
        campaign = ScriptedCampaign({"X5": [RuntimeError("boom")]})
        supervisor, store = _supervisor(config, campaign, single_campaign=True)
        result = asyncio.run(supervisor.run())

        assert result.status == RETRY
        assert result.exit_code == 1
        assert store.load() == Checkpoint(model_index=0, retry_count=1)

    def test_last_model_completes(self, config):
        """Finishing the last model resets the checkpoint."""
        campaign = ScriptedCampaign()
        supervisor, store = _supervisor(config, campaign, single_campaign=True)
        store.save(Checkpoint(model_index=2, retry_count=0))
        result = asyncio.run(supervisor.run())

        assert result.status == COMPLETED
        assert store.load() == Checkpoint()

    def test_successive_launches_walk_models(self, config):
        """Relaunching after each campaign visits every model once."""
        campaign = ScriptedCampaign()
        statuses = []
        for _ in MODELS:
            supervisor, _ = _supervisor(config, campaign, single_campaign=True)
            statuses.append(asyncio.run(supervisor.run()).status)

        assert statuses == [ADVANCED, ADVANCED, COMPLETED]
        assert [model for model, _ in campaign.calls] == MODELS
