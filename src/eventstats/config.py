from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


def _env_bool(name: str, default: str = "0") -> bool:
    value = os.getenv(name, default)
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    elastic_hosts: str = os.getenv("ELASTICSEARCH_HOST", "http://127.0.0.1:9200")
    elastic_user: str = os.getenv("ELASTICSEARCH_USER", "")
    elastic_password: str = os.getenv("ELASTICSEARCH_PASSWORD", "")
    elastic_verify_certs: bool = _env_bool("ELASTICSEARCH_VERIFY_CERTS", "1")
    elastic_timeout_seconds: float = float(os.getenv("ELASTICSEARCH_TIMEOUT", "60"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # ── Event partitions ─────────────────────────────────────
    # Monthly indices named <prefix>-YYYYMM
    events_index_prefix: str = os.getenv("EVENTS_INDEX_PREFIX", "events-v1")
    events_retention_months: int = int(os.getenv("EVENTS_RETENTION_MONTHS", "0"))
    events_max_partitions: int = int(os.getenv("EVENTS_MAX_PARTITIONS", "36"))

    # ── Stats aggregation ────────────────────────────────────
    stats_precision_threshold: int = int(
        os.getenv("STATS_PRECISION_THRESHOLD", "1000")
    )
    stats_default_max_terms: int = int(os.getenv("STATS_DEFAULT_MAX_TERMS", "25"))
    stats_occurrence_data_points: int = int(
        os.getenv("STATS_OCCURRENCE_DATA_POINTS", "100")
    )
    stats_term_data_points: int = int(os.getenv("STATS_TERM_DATA_POINTS", "10"))
    stats_trace_queries: bool = _env_bool("STATS_TRACE_QUERIES", "0")

    @property
    def elastic_hosts_list(self) -> List[str]:
        return [host.strip() for host in self.elastic_hosts.split(",") if host.strip()]


def get_settings() -> Settings:
    return Settings()


def validate_settings(settings: Settings) -> None:
    """Reject settings the engine cannot run with."""
    if not settings.elastic_hosts_list:
        raise ValueError("ELASTICSEARCH_HOST must name at least one host")
    if settings.elastic_timeout_seconds <= 0:
        raise ValueError("ELASTICSEARCH_TIMEOUT must be positive")
    if not settings.events_index_prefix.strip():
        raise ValueError("EVENTS_INDEX_PREFIX must not be empty")
    if settings.events_retention_months < 0:
        raise ValueError("EVENTS_RETENTION_MONTHS must be >= 0 (0 disables)")
    if settings.events_max_partitions < 1:
        raise ValueError("EVENTS_MAX_PARTITIONS must be >= 1")
    if not 0 < settings.stats_precision_threshold <= 40000:
        raise ValueError("STATS_PRECISION_THRESHOLD must be between 1 and 40000")
    for name, value in (
        ("STATS_DEFAULT_MAX_TERMS", settings.stats_default_max_terms),
        ("STATS_OCCURRENCE_DATA_POINTS", settings.stats_occurrence_data_points),
        ("STATS_TERM_DATA_POINTS", settings.stats_term_data_points),
    ):
        if value < 1:
            raise ValueError(f"{name} must be a positive integer")
