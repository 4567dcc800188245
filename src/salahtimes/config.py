"""Settings read from the environment (and a local .env file)."""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

from salahtimes.cache import DEFAULT_TTL
from salahtimes.errors import InvalidConfiguration
from salahtimes.models import CalculationMethod, Madhab

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Defaults for the service. Explicit values passed to calls win."""

    method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE
    madhab: Madhab = Madhab.SHAFI
    cache_ttl: timedelta = DEFAULT_TTL
    data_dir: Path | None = None  # None keeps adjustments and cache in memory
    strict_twilight: bool = False  # Fail rather than fall back to solar midnight
    log_level: str = "WARNING"

    @property
    def adjustments_path(self) -> Path | None:
        return self.data_dir / "adjustments.json" if self.data_dir else None

    @property
    def cache_path(self) -> Path | None:
        return self.data_dir / "prayer_times_cache.json" if self.data_dir else None


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise InvalidConfiguration(f"{name} must be a boolean, got {raw!r}")


def load_settings(env_file: str | os.PathLike[str] | None = None) -> Settings:
    """Build Settings from ``SALAHTIMES_*`` environment variables.

    Variables already set in the process take precedence over the .env file.

    Raises:
        InvalidConfiguration: On an unknown method/madhab or malformed number.
    """
    load_dotenv(env_file)
    env = os.environ

    try:
        method = CalculationMethod(env.get("SALAHTIMES_METHOD", CalculationMethod.MUSLIM_WORLD_LEAGUE.value))
        madhab = Madhab(env.get("SALAHTIMES_MADHAB", Madhab.SHAFI.value))
    except ValueError as e:
        raise InvalidConfiguration(str(e)) from None

    ttl_raw = env.get("SALAHTIMES_CACHE_TTL_DAYS")
    cache_ttl = DEFAULT_TTL
    if ttl_raw:
        try:
            cache_ttl = timedelta(days=float(ttl_raw))
        except ValueError:
            raise InvalidConfiguration(f"SALAHTIMES_CACHE_TTL_DAYS is not a number: {ttl_raw!r}") from None
        if cache_ttl <= timedelta(0):
            raise InvalidConfiguration("SALAHTIMES_CACHE_TTL_DAYS must be positive")

    data_dir_raw = env.get("SALAHTIMES_DATA_DIR")
    log_level = env.get("SALAHTIMES_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise InvalidConfiguration(f"Unknown log level: {log_level!r}")

    return Settings(
        method=method,
        madhab=madhab,
        cache_ttl=cache_ttl,
        data_dir=Path(data_dir_raw).expanduser() if data_dir_raw else None,
        strict_twilight=_parse_bool(
            "SALAHTIMES_STRICT_TWILIGHT", env.get("SALAHTIMES_STRICT_TWILIGHT", "")
        ),
        log_level=log_level,
    )


def configure_logging(level: str | int = "WARNING") -> None:
    """Console logging for applications embedding the package."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
