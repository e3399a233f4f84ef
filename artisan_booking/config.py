"""
Centralized configuration with environment variable overrides.

Scheduling grid, duration limits, recurrence ceilings, pricing and refund
tiers are all configurable here. Nothing is hardcoded in scheduling or
lifecycle logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _parse_clock(name: str, value: str) -> datetime:
    try:
        return datetime.strptime(value.strip(), "%H:%M")
    except ValueError:
        raise ValueError(f"{name} must be HH:MM, got {value!r}") from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Working-hours fallback, slot grid, and recurrence limits."""

    default_work_start: str = os.getenv("DEFAULT_WORK_START", "09:00")
    default_work_end: str = os.getenv("DEFAULT_WORK_END", "17:00")
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "30")
    min_duration_minutes: int = _safe_int("MIN_DURATION_MINUTES", "15")
    max_duration_minutes: int = _safe_int("MAX_DURATION_MINUTES", "480")
    recurrence_max_occurrences: int = _safe_int("RECURRENCE_MAX_OCCURRENCES", "52")


@dataclass(frozen=True)
class PricingConfig:
    """Currency, loyalty accrual, and refund tier settings."""

    default_currency: str = os.getenv("DEFAULT_CURRENCY", "USD")
    loyalty_currency_per_point: int = _safe_int("LOYALTY_CURRENCY_PER_POINT", "10")
    refund_full_hours: float = _safe_float("REFUND_FULL_HOURS", "24")
    refund_partial_hours: float = _safe_float("REFUND_PARTIAL_HOURS", "12")
    refund_partial_rate: float = _safe_float("REFUND_PARTIAL_RATE", "0.75")
    refund_minimal_hours: float = _safe_float("REFUND_MINIMAL_HOURS", "6")
    refund_minimal_rate: float = _safe_float("REFUND_MINIMAL_RATE", "0.50")


@dataclass(frozen=True)
class LimitsConfig:
    """Free-text length limits enforced on inbound requests."""

    max_notes_length: int = _safe_int("MAX_NOTES_LENGTH", "2000")
    max_customer_notes_length: int = _safe_int("MAX_CUSTOMER_NOTES_LENGTH", "1000")
    max_reason_length: int = _safe_int("MAX_REASON_LENGTH", "500")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "artisan-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    start = _parse_clock("DEFAULT_WORK_START", sched.default_work_start)
    end = _parse_clock("DEFAULT_WORK_END", sched.default_work_end)
    if end <= start:
        raise ValueError(
            "DEFAULT_WORK_END must be after DEFAULT_WORK_START, "
            f"got {sched.default_work_start}-{sched.default_work_end}"
        )
    try:
        ZoneInfo(sched.default_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"DEFAULT_TIMEZONE is not a known timezone: {sched.default_timezone!r}"
        ) from None
    if sched.slot_step_minutes < 1:
        raise ValueError(
            f"SLOT_STEP_MINUTES must be >= 1, got {sched.slot_step_minutes}"
        )
    if sched.min_duration_minutes < 1:
        raise ValueError(
            f"MIN_DURATION_MINUTES must be >= 1, got {sched.min_duration_minutes}"
        )
    if sched.max_duration_minutes < sched.min_duration_minutes:
        raise ValueError(
            "MAX_DURATION_MINUTES must be >= MIN_DURATION_MINUTES, "
            f"got {sched.max_duration_minutes} < {sched.min_duration_minutes}"
        )
    if sched.recurrence_max_occurrences < 1:
        raise ValueError(
            "RECURRENCE_MAX_OCCURRENCES must be >= 1, "
            f"got {sched.recurrence_max_occurrences}"
        )

    pricing = config.pricing
    if len(pricing.default_currency) != 3:
        raise ValueError(
            f"DEFAULT_CURRENCY must be a 3-letter code, got {pricing.default_currency!r}"
        )
    if pricing.loyalty_currency_per_point < 1:
        raise ValueError(
            "LOYALTY_CURRENCY_PER_POINT must be >= 1, "
            f"got {pricing.loyalty_currency_per_point}"
        )
    if not (
        pricing.refund_full_hours >= pricing.refund_partial_hours
        >= pricing.refund_minimal_hours >= 0
    ):
        raise ValueError(
            "Refund tiers must satisfy REFUND_FULL_HOURS >= REFUND_PARTIAL_HOURS "
            ">= REFUND_MINIMAL_HOURS >= 0"
        )
    for rate_name, rate_value in [
        ("REFUND_PARTIAL_RATE", pricing.refund_partial_rate),
        ("REFUND_MINIMAL_RATE", pricing.refund_minimal_rate),
    ]:
        if not 0.0 <= rate_value <= 1.0:
            raise ValueError(f"{rate_name} must be between 0.0 and 1.0, got {rate_value}")

    for limit_name, limit_value in [
        ("MAX_NOTES_LENGTH", config.limits.max_notes_length),
        ("MAX_CUSTOMER_NOTES_LENGTH", config.limits.max_customer_notes_length),
        ("MAX_REASON_LENGTH", config.limits.max_reason_length),
    ]:
        if limit_value < 1:
            raise ValueError(f"{limit_name} must be >= 1, got {limit_value}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
