"""
Centralized settings for the MeliDash backend.

Values come from MELIDASH_* environment variables with sensible defaults.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def get_package_root() -> Path:
    """Get the melidash package directory (where data/ lives)."""
    return Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('true', '1', 'yes', 'on')


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return float(value)


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Runtime environment ("development" or "production")
    environment: str = 'development'

    # Load mock arrays into the domain services on startup
    use_mock_data: bool = True

    # Multiplier for simulated service latency (0 disables the delays)
    latency_scale: float = 1.0

    # Assumed cost as a fraction of the selling price
    cost_ratio: float = 0.7

    # Price swings above this percentage raise an alert
    significant_change_pct: float = 15.0

    # Auth
    jwt_secret: str = 'melidash-dev-secret'
    jwt_algorithm: str = 'HS256'
    jwt_expire_days: int = 7
    reset_token_ttl_minutes: int = 60

    app_url: str = 'http://localhost:3000'
    log_level: str = 'INFO'

    # Bundled data files
    seed_rules: Path = field(default_factory=lambda: get_package_root() / 'data' / 'pricing_rules.json')

    @property
    def is_development(self) -> bool:
        return self.environment == 'development'

    def delay(self, seconds: float) -> float:
        """Scale a simulated latency in seconds."""
        return max(0.0, seconds * self.latency_scale)

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from the environment."""
        defaults = cls()
        seed_rules = os.environ.get('MELIDASH_SEED_RULES')

        return cls(
            environment=os.environ.get('MELIDASH_ENV', defaults.environment).strip().lower(),
            use_mock_data=_env_bool('MELIDASH_USE_MOCK_DATA', defaults.use_mock_data),
            latency_scale=_env_float('MELIDASH_LATENCY_SCALE', defaults.latency_scale),
            cost_ratio=_env_float('MELIDASH_COST_RATIO', defaults.cost_ratio),
            significant_change_pct=_env_float('MELIDASH_SIGNIFICANT_CHANGE_PCT', defaults.significant_change_pct),
            jwt_secret=os.environ.get('MELIDASH_JWT_SECRET', defaults.jwt_secret),
            jwt_expire_days=int(_env_float('MELIDASH_JWT_EXPIRE_DAYS', defaults.jwt_expire_days)),
            app_url=os.environ.get('MELIDASH_APP_URL', defaults.app_url).rstrip('/'),
            log_level=os.environ.get('MELIDASH_LOG_LEVEL', defaults.log_level).upper(),
            seed_rules=Path(seed_rules) if seed_rules else defaults.seed_rules,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
