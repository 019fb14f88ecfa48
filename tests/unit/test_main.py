"""Tests for the replay entry point."""

from __future__ import annotations

import json

import pytest
import structlog

from decision_engine.main import main


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestReplay:
    def test_valid_response_exit_zero(self, tmp_path, capsys, eth_long, response_factory):
        path = tmp_path / "response.txt"
        path.write_text(response_factory([eth_long]), encoding="utf-8")

        status = main([str(path), "--equity", "5000"])

        assert status == 0
        out = json.loads(capsys.readouterr().out)
        assert out["cot_trace"] == "rationale text"
        assert out["decisions"][0]["symbol"] == "ETHUSDT"
        assert "error" not in out

    def test_invalid_response_exit_one(self, tmp_path, capsys, eth_long, response_factory):
        eth_long["take_profit_levels"] = [3966, 3900, 4197]
        path = tmp_path / "response.txt"
        path.write_text(response_factory([eth_long]), encoding="utf-8")

        status = main([str(path), "--equity", "5000"])

        assert status == 1
        out = json.loads(capsys.readouterr().out)
        assert out["decisions"] == []
        assert "[ordering]" in out["error"]
        assert out["cot_trace"] == "rationale text"

    def test_leverage_flag_applies(self, tmp_path, capsys, eth_long, response_factory):
        path = tmp_path / "response.txt"
        path.write_text(response_factory([eth_long]), encoding="utf-8")

        status = main([str(path), "--equity", "5000", "--major-leverage", "2"])

        assert status == 1
        assert "[leverage]" in json.loads(capsys.readouterr().out)["error"]
