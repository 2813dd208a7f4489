import importlib
import logging

from farmassist import logger as logger_module
from farmassist import logic
from farmassist.schema import FarmingType, WeatherReading


def test_unknown_log_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    reloaded = importlib.reload(logger_module)

    assert reloaded.LOG_LEVEL == "INFO"
    assert reloaded.logger.level == logging.INFO


def test_known_log_level_is_used(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    reloaded = importlib.reload(logger_module)

    assert reloaded.logger.level == logging.WARNING

    monkeypatch.setenv("LOG_LEVEL", "INFO")
    importlib.reload(logger_module)


def test_disease_risk_debug_log_is_lazy(monkeypatch):
    recorded = []
    monkeypatch.setattr(logic.logger, "debug", lambda msg, *args: recorded.append((msg, args)))

    current = WeatherReading(temperature=28, humidity=85, wind_speed=5, precipitation=2)
    logic.estimate_disease_risk(current, None, FarmingType.crops)

    msg, args = recorded[0]
    assert "%s" in msg
    assert args[0] == "crops"
