"""
Configuration helpers for the adoption system.

Exposes a frozen Settings object read from environment variables (data
directory, bootstrap admin, password policy, logging) so that repositories and
services do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    data_dir: Path
    max_attempts: int
    bootstrap_username: str
    bootstrap_password: str
    bootstrap_login_enabled: bool
    password_policy: str
    log_level: str
    seed_pets: bool

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.dat"

    @property
    def pets_file(self) -> Path:
        return self.data_dir / "pets.dat"

    @property
    def applications_file(self) -> Path:
        return self.data_dir / "applications.dat"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    policy = (os.getenv("ADOPTION_PASSWORD_POLICY") or "basic").strip().lower()
    if policy not in {"basic", "strict"}:
        policy = "basic"

    return Settings(
        data_dir=Path(os.getenv("ADOPTION_DATA_DIR", "data")),
        max_attempts=max(1, _int(os.getenv("ADOPTION_MAX_ATTEMPTS", "3"), 3)),
        bootstrap_username=os.getenv("ADOPTION_BOOTSTRAP_USERNAME", "admin"),
        bootstrap_password=os.getenv("ADOPTION_BOOTSTRAP_PASSWORD", "admin123"),
        bootstrap_login_enabled=_bool(os.getenv("ADOPTION_BOOTSTRAP_LOGIN"), True),
        password_policy=policy,
        log_level=(os.getenv("ADOPTION_LOG_LEVEL") or "WARNING").upper(),
        seed_pets=_bool(os.getenv("ADOPTION_SEED_PETS"), True),
    )
