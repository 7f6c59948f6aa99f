"""Configuration management with environment variable support."""

import logging
import os
import secrets
from dataclasses import dataclass, field
from decimal import Decimal

from core.chips import CHIP_VALUES
from core.rules import TableRules


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _parse_seats() -> list[str]:
    """Parse SEATS environment variable into seat names."""
    seats = os.getenv("SEATS", "Player")
    return [s.strip() for s in seats.split(",") if s.strip()] or ["Player"]


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(
        default_factory=lambda: os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    )
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class PacingConfig:
    """
    Presentation delays in seconds.

    Only the WebSocket layer waits on these; the engine never does.
    """

    deal_delay: float = field(default_factory=lambda: float(os.getenv("DEAL_DELAY", "1.0")))
    blackjack_delay: float = field(
        default_factory=lambda: float(os.getenv("BLACKJACK_DELAY", "0.5"))
    )
    dealer_delay: float = field(default_factory=lambda: float(os.getenv("DEALER_DELAY", "1.0")))


@dataclass(frozen=True)
class GameConfig:
    """Default game configuration."""

    initial_bankroll: int = field(
        default_factory=lambda: int(os.getenv("INITIAL_BANKROLL", "1000"))
    )
    blackjack_payout: float = 1.5
    chip_values: tuple[int, ...] = CHIP_VALUES
    seats: list[str] = field(default_factory=_parse_seats)

    def to_rules(self) -> TableRules:
        """Build the engine's table rules."""
        return TableRules(
            initial_bankroll=Decimal(self.initial_bankroll),
            blackjack_payout=Decimal(str(self.blackjack_payout)),
        )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    session_ttl: int = 3600  # Session timeout in seconds

    game: GameConfig = field(default_factory=GameConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


def configure_logging(app_config: "AppConfig") -> None:
    """Set up root logging for the application."""
    level = logging.DEBUG if app_config.debug else app_config.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global configuration instance
config = AppConfig()
