"""
Configuration for the match runner and the web interface.

Values come from the dataclass defaults, overridden by OMEGA_* environment
variables. `load_env` pulls those variables from a config.env file.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_ENV_FILE = PROJECT_ROOT / "config.env"


def load_env(env_file: Optional[str] = None) -> bool:
    """
    Load OMEGA_* settings from a config.env file into os.environ.

    Variables already set in the environment are left alone.

    Returns:
        True if a file was found and loaded
    """
    path = Path(env_file) if env_file else DEFAULT_ENV_FILE
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class SimulationConfig:
    """Settings shared by the CLI runner and the web interface."""

    # Match limits
    max_ticks: int = 300                # Ticks before a match is called a draw
    stop_when_finished: bool = False    # End the match when the program runs out

    # Web interface
    tick_ms: int = 380                  # Timer period for Run mode
    port: int = 8080

    def __post_init__(self):
        if self.max_ticks < 1:
            raise ValueError("max_ticks must be at least 1")
        if self.tick_ms < 1:
            raise ValueError("tick_ms must be positive")

    @classmethod
    def from_env(cls) -> "SimulationConfig":
        """Build a config from OMEGA_* environment variables."""
        defaults = cls()
        return cls(
            max_ticks=_env_int("OMEGA_MAX_TICKS", defaults.max_ticks),
            stop_when_finished=_env_bool("OMEGA_STOP_WHEN_FINISHED", defaults.stop_when_finished),
            tick_ms=_env_int("OMEGA_TICK_MS", defaults.tick_ms),
            port=_env_int("OMEGA_PORT", defaults.port),
        )
