from __future__ import annotations

import dataclasses
import logging

import pytest

from pourover_trainer.config import PourConfig
from pourover_trainer.logging_config import LOG_LEVEL_ENV, level_from_env, setup_logging


def test_defaults_are_valid() -> None:
    cfg = PourConfig().validate()
    assert cfg.target_volume_ml == 250.0
    assert cfg.grid_resolution == 3
    assert cfg.max_rate_ml_s == pytest.approx(cfg.best_rate_ml_s * 5)
    assert cfg.max_sim_dt_s == pytest.approx(0.05)


def test_config_is_immutable() -> None:
    cfg = PourConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.target_volume_ml = 300.0  # type: ignore[misc]


def test_overrides_return_validated_copy() -> None:
    cfg = PourConfig()
    tuned = cfg.with_overrides(target_volume_ml=300.0, grid_resolution=8)
    assert tuned.target_volume_ml == 300.0
    assert tuned.grid_resolution == 8
    assert cfg.target_volume_ml == 250.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"grid_resolution": 1},
        {"active_cell_radius": 0.0},
        {"active_cell_radius": 1.5},
        {"target_tolerance_ml": -1.0},
        {"round_to_ml": 0.0},
        {"best_rate_ml_s": 0.0},
        {"max_rate_ml_s": 1.0},
        {"max_sim_dt_s": 0.0},
        {"duration_tolerance_s": -5.0},
    ],
)
def test_invalid_overrides_fail_fast(overrides: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        PourConfig().with_overrides(**overrides)


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    assert level_from_env() == logging.WARNING

    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    assert level_from_env() == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV, "15")
    assert level_from_env() == 15

    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
    assert level_from_env(logging.ERROR) == logging.ERROR


def test_setup_logging_replaces_handlers(tmp_path) -> None:
    log_file = tmp_path / "pour.log"
    setup_logging(logging.INFO)
    setup_logging(logging.INFO, str(log_file))

    logger = logging.getLogger("pourover_trainer")
    assert len(logger.handlers) == 2
    logging.getLogger("pourover_trainer.session").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")

    setup_logging(logging.WARNING)
    assert len(logger.handlers) == 1
