"""Pre-DB bootstrap configuration. Zero imports from the rest of the app
other than constants.

Stores user preferences that must be known before opening the DB (db_folder)
and the forecast defaults the reporting views start from.
Config lives in ~/.cashflow/config.json, or $CASHFLOW_CONFIG_DIR/config.json.
"""
import json
import os
from pathlib import Path
from utils.constants import (
    ALL_CONTEXTS, CONTEXTS, DEFAULT_FORECAST_MONTHS, DEFAULT_SCENARIO, SCENARIOS,
)


def config_dir() -> Path:
    override = os.environ.get("CASHFLOW_CONFIG_DIR")
    return Path(override) if override else Path.home() / ".cashflow"


def config_file() -> Path:
    return config_dir() / "config.json"


def load_config() -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    try:
        with open(config_file(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    target = config_file()
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder")


def set_db_folder(path: str | None) -> None:
    """Update db_folder in config and save."""
    config = load_config()
    if path is None:
        config.pop("db_folder", None)
    else:
        config["db_folder"] = path
    save_config(config)


def get_forecast_months() -> int:
    value = load_config().get("forecast_months", DEFAULT_FORECAST_MONTHS)
    try:
        months = int(value)
    except (TypeError, ValueError):
        return DEFAULT_FORECAST_MONTHS
    return months if months > 0 else DEFAULT_FORECAST_MONTHS


def set_forecast_months(months: int) -> None:
    if months <= 0:
        raise ValueError("Forecast horizon must be at least one month.")
    config = load_config()
    config["forecast_months"] = months
    save_config(config)


def get_forecast_scenario() -> str:
    value = load_config().get("forecast_scenario", DEFAULT_SCENARIO)
    return value if value in SCENARIOS else DEFAULT_SCENARIO


def set_forecast_scenario(scenario: str) -> None:
    if scenario not in SCENARIOS:
        raise ValueError(f"Unknown scenario '{scenario}'.")
    config = load_config()
    config["forecast_scenario"] = scenario
    save_config(config)


def get_financial_context() -> str:
    value = load_config().get("financial_context", ALL_CONTEXTS)
    return value if value in CONTEXTS else ALL_CONTEXTS


def set_financial_context(context: str) -> None:
    if context != ALL_CONTEXTS and context not in CONTEXTS:
        raise ValueError(f"Unknown context '{context}'.")
    config = load_config()
    config["financial_context"] = context
    save_config(config)
