"""
Unit tests for event replay, settings and the CLI entry point.
"""

import json
import logging

import pytest

from ido_rewards.cli import main
from ido_rewards.context import RewardsContext
from ido_rewards.replay import apply_event, load_events, replay_events
from ido_rewards.shared.config import load_settings
from ido_rewards.shared.exceptions import ConfigurationException
from ido_rewards.shared.fixed_point import SCALE
from ido_rewards.shared.logging import get_logger, set_log_level
from ido_rewards.shared.results import ErrorSeverity
from tests.conftest import ALICE, BOB, CAMPAIGN_ID, RUNTIME, T


class TestReplay:
    def test_sample_log(self, sample_events):
        ctx = RewardsContext()
        summary, results = replay_events(ctx, sample_events)

        assert summary.events_total == 6
        assert summary.events_applied == 4
        assert summary.events_rejected == 2
        assert summary.rejected_by_type == {"add": 1, "claim": 1}
        assert [e.kind for e in summary.errors] == [
            "OutsideWindow",
            "NothingToClaim",
        ]
        assert summary.errors[0].context["index"] == 3
        assert results[4].data["amount"] == 500
        assert ctx.get_accrued_shares(BOB, CAMPAIGN_ID) == 198 * SCALE

    def test_unknown_event_type(self):
        result = apply_event(RewardsContext(), {"type": "mint"})
        assert result.success is False
        assert result.errors[0].severity == ErrorSeverity.ERROR

    def test_malformed_event(self):
        result = apply_event(
            RewardsContext(), {"type": "swap", "campaign_id": CAMPAIGN_ID}
        )
        assert result.success is False
        assert "Malformed" in result.errors[0].message

    def test_signed_swap_volume(self, sample_events):
        ctx = RewardsContext()
        replay_events(ctx, sample_events[:1])
        event = {
            "type": "swap",
            "user": ALICE,
            "campaign_id": CAMPAIGN_ID,
            "pair": sample_events[0]["pair"],
            "volume": "-42",
            "timestamp": T + 5,
        }
        assert apply_event(ctx, event).data == 42 * SCALE

    def test_remove_without_open_period_warns(self, sample_events):
        ctx = RewardsContext()
        events = sample_events[:1] + [
            {
                "type": "remove",
                "user": ALICE,
                "campaign_id": CAMPAIGN_ID,
                "pair": sample_events[0]["pair"],
                "amount": 100,
                "timestamp": T + 5,
            }
        ]
        summary, results = replay_events(ctx, events)

        assert results[1].success is True
        assert results[1].data == 0
        assert results[1].has_warnings() is True
        assert summary.events_rejected == 0
        assert summary.warning_count() == 1
        warning = summary.errors[0]
        assert warning.severity == ErrorSeverity.WARNING
        assert warning.context["index"] == 1
        assert warning.context["user"] == ALICE

    def test_swap_after_claim_warns(self, sample_events):
        ctx = RewardsContext()
        replay_events(ctx, sample_events[:5])
        result = apply_event(
            ctx,
            {
                "type": "swap",
                "user": ALICE,
                "campaign_id": CAMPAIGN_ID,
                "pair": sample_events[0]["pair"],
                "volume": 10,
                "timestamp": T + 150,
            },
        )
        assert result.success is True
        assert result.has_warnings() is True
        assert ctx.get_accrued_shares(ALICE, CAMPAIGN_ID) == 0

    def test_malformed_user_is_rejected(self, sample_events):
        ctx = RewardsContext()
        replay_events(ctx, sample_events[:1])
        result = apply_event(
            ctx,
            {
                "type": "add",
                "user": "0x1234",
                "campaign_id": CAMPAIGN_ID,
                "pair": sample_events[0]["pair"],
                "amount": 100,
                "timestamp": T + 1,
            },
        )
        assert result.success is False
        assert result.errors[0].kind == "InvalidAddress"
        assert result.errors[0].severity == ErrorSeverity.ERROR

    def test_load_events_wrapped(self, tmp_path, sample_events):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"events": sample_events}))
        assert load_events(path) == sample_events

    def test_load_events_rejects_scalar(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text("42")
        with pytest.raises(ValueError):
            load_events(path)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "IDO_LOG_LEVEL",
            "IDO_STATE_FILE",
            "IDO_RUNTIME_ADDRESS",
            "IDO_OUTPUT_DIR",
        ):
            monkeypatch.delenv(var, raising=False)
        settings = load_settings()
        assert settings.log_level == "INFO"
        assert settings.state_file is None
        assert settings.runtime_address is None
        assert settings.output_dir == "output"

    def test_runtime_address_is_checksummed(self, monkeypatch):
        monkeypatch.setenv("IDO_RUNTIME_ADDRESS", RUNTIME.lower())
        assert load_settings().runtime_address == RUNTIME

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("IDO_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationException):
            load_settings()

    def test_invalid_runtime_address(self, monkeypatch):
        monkeypatch.setenv("IDO_RUNTIME_ADDRESS", "0x1234")
        with pytest.raises(ConfigurationException):
            load_settings()


class TestCli:
    def test_replay_writes_state(self, tmp_path, monkeypatch, sample_events):
        events_file = tmp_path / "events.json"
        events_file.write_text(json.dumps(sample_events))
        monkeypatch.setenv("IDO_OUTPUT_DIR", str(tmp_path / "out"))
        monkeypatch.delenv("IDO_LOG_LEVEL", raising=False)
        monkeypatch.delenv("IDO_RUNTIME_ADDRESS", raising=False)

        main(
            [
                "replay",
                str(events_file),
                "--output",
                "state.json",
                "--summary",
                "summary.json",
            ]
        )

        state = json.loads((tmp_path / "out" / "state.json").read_text())
        summary = json.loads((tmp_path / "out" / "summary.json").read_text())
        assert state["version"] == 1
        assert state["campaigns"][0]["reward_pool"] == 500
        assert summary["events_rejected"] == 2

    def test_allocation_from_state(self, tmp_path, monkeypatch, sample_events):
        events_file = tmp_path / "events.json"
        events_file.write_text(json.dumps(sample_events))
        monkeypatch.setenv("IDO_OUTPUT_DIR", str(tmp_path))
        monkeypatch.delenv("IDO_LOG_LEVEL", raising=False)
        monkeypatch.delenv("IDO_RUNTIME_ADDRESS", raising=False)
        main(["replay", str(events_file), "--output", "state.json"])

        main(
            [
                "allocation",
                "--state",
                str(tmp_path / "state.json"),
                "--campaign",
                CAMPAIGN_ID,
                "--user",
                BOB.lower(),
                "--now",
                str(T + 500),
            ]
        )

    def test_campaign_json_from_state_env(
        self, tmp_path, monkeypatch, sample_events
    ):
        events_file = tmp_path / "events.json"
        events_file.write_text(json.dumps(sample_events))
        monkeypatch.setenv("IDO_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("IDO_STATE_FILE", str(tmp_path / "state.json"))
        monkeypatch.delenv("IDO_LOG_LEVEL", raising=False)
        monkeypatch.delenv("IDO_RUNTIME_ADDRESS", raising=False)
        main(["replay", str(events_file), "--output", "state.json"])

        main(["campaign", "--campaign", CAMPAIGN_ID, "--json"])

        saved = json.loads((tmp_path / f"campaign_{CAMPAIGN_ID}.json").read_text())
        assert saved["total_allocation"] == 1000
        assert saved["reward_pool"] == 500

    def test_no_state_file_exits(self, monkeypatch):
        monkeypatch.delenv("IDO_STATE_FILE", raising=False)
        with pytest.raises(SystemExit):
            main(["campaign", "--campaign", CAMPAIGN_ID])

    def test_missing_campaign_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(
                [
                    "campaign",
                    "--state",
                    str(tmp_path / "empty.json"),
                    "--campaign",
                    "nope",
                ]
            )
        assert exc_info.value.code == 1


    def test_log_level_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("IDO_LOG_LEVEL", "WARNING")
        try:
            with pytest.raises(SystemExit):
                main(
                    [
                        "campaign",
                        "--state",
                        str(tmp_path / "empty.json"),
                        "--campaign",
                        "nope",
                    ]
                )
            assert get_logger().level == logging.WARNING
        finally:
            set_log_level("INFO")

    def test_verbose_overrides_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("IDO_LOG_LEVEL", "WARNING")
        try:
            with pytest.raises(SystemExit):
                main(
                    [
                        "--verbose",
                        "campaign",
                        "--state",
                        str(tmp_path / "empty.json"),
                        "--campaign",
                        "nope",
                    ]
                )
            assert get_logger().level == logging.DEBUG
        finally:
            set_log_level("INFO")


class TestFormatters:
    def test_format_token_amount(self):
        from ido_rewards.utils.formatters import format_token_amount

        assert format_token_amount(10**18) == "1.0000"
        assert format_token_amount(1500 * 10**18) == "1,500.0000"

    def test_format_address(self):
        from ido_rewards.utils.formatters import format_address

        assert format_address(ALICE) == f"{ALICE[:6]}...{ALICE[-4:]}"
        assert format_address("") == "N/A"

    def test_format_timestamp(self):
        from ido_rewards.utils.formatters import format_timestamp

        assert format_timestamp(T) == "2025-12-04 00:00"
        assert format_timestamp(None) == "-"
