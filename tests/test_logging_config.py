from __future__ import annotations

import logging_config


def test_configure_logging_applies_level_once(monkeypatch) -> None:
    applied: list[dict] = []
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setattr(logging_config.logging.config, "dictConfig", applied.append)
    monkeypatch.setenv("LOG_LEVEL", "warning")

    logging_config.configure_logging()
    logging_config.configure_logging("debug")

    assert len(applied) == 1
    assert applied[0]["root"]["level"] == "WARNING"
    assert applied[0]["handlers"]["stdout"]["stream"] == "ext://sys.stdout"


def test_explicit_level_wins_over_environment(monkeypatch) -> None:
    applied: list[dict] = []
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setattr(logging_config.logging.config, "dictConfig", applied.append)
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.delenv("REGION_LOG_LEVEL", raising=False)

    logging_config.configure_logging("debug")

    assert applied[0]["root"]["level"] == "DEBUG"
    assert applied[0]["loggers"]["region"]["level"] == "DEBUG"
