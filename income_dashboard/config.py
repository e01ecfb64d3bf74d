# income_dashboard/config.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging
import os

# ---------------- Paths ----------------
ROOT       = Path(__file__).resolve().parents[1]
CHARTS_DIR = ROOT / "data" / "charts"          # bundled chart-spec JSON files

# ---------------- Remote resources ----------------
TOPOLOGY_URL = "https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json"
STATE_INCOME_URL = (
    "https://gist.githubusercontent.com/chaithuchowdhary/a487127476e1ec697be7e2f4abf7a15b"
    "/raw/67f493e03d11d649fec8760546e8155f6308dd50/stateincome.json"
)
CITY_INCOME_URL = (
    "https://gist.githubusercontent.com/chaithuchowdhary/66e91b9faf1a3b91bf9ac22131dbf7cc"
    "/raw/82af525e5694cc96f5b518e90bb07c0459cf264d/income.csv"
)

ENV_PREFIX = "INCOME_DASHBOARD_"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env(environ, name: str) -> str | None:
    return (environ.get(ENV_PREFIX + name, "") or "").strip() or None


def _truthy(value: str | None) -> bool:
    return (value or "").lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    topology_url: str = TOPOLOGY_URL
    state_income_url: str = STATE_INCOME_URL
    city_income_url: str = CITY_INCOME_URL
    charts_dir: Path = CHARTS_DIR
    timeout: float = 30.0
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Read INCOME_DASHBOARD_* overrides; anything unset keeps its default."""
        environ = os.environ if environ is None else environ
        timeout = _env(environ, "TIMEOUT")
        charts = _env(environ, "CHARTS_DIR")
        try:
            timeout_s = float(timeout) if timeout else cls.timeout
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}TIMEOUT must be a number, got {timeout!r}") from exc
        return cls(
            topology_url=_env(environ, "TOPOLOGY_URL") or TOPOLOGY_URL,
            state_income_url=_env(environ, "STATE_INCOME_URL") or STATE_INCOME_URL,
            city_income_url=_env(environ, "CITY_INCOME_URL") or CITY_INCOME_URL,
            charts_dir=Path(charts) if charts else CHARTS_DIR,
            timeout=timeout_s,
            debug=_truthy(_env(environ, "DEBUG")),
            log_level=(_env(environ, "LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
