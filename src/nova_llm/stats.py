"""Per-provider structured generation statistics."""

from __future__ import annotations

from collections import Counter
from datetime import datetime


class _ProviderStats:
    def __init__(self) -> None:
        self.total = 0
        self.successes = 0
        self.attempts = 0
        self.total_seconds = 0.0
        self.failures: Counter[str] = Counter()


class GenerationStats:
    """Track generate_object outcomes, attempts, and timings per provider."""

    def __init__(self) -> None:
        self._start_time = datetime.now()
        self._providers: dict[str, _ProviderStats] = {}

    def _get(self, provider: str) -> _ProviderStats:
        return self._providers.setdefault(provider, _ProviderStats())

    def record_success(self, provider: str, seconds: float, attempts: int = 1) -> None:
        stats = self._get(provider)
        stats.total += 1
        stats.successes += 1
        stats.attempts += attempts
        stats.total_seconds += seconds

    def record_failure(
        self, provider: str, category: str, seconds: float, attempts: int = 1
    ) -> None:
        stats = self._get(provider)
        stats.total += 1
        stats.attempts += attempts
        stats.total_seconds += seconds
        stats.failures[category] += 1

    def success_rate(self, provider: str) -> float | None:
        stats = self._providers.get(provider)
        if not stats or not stats.total:
            return None
        return stats.successes / stats.total

    def summary(self) -> dict:
        uptime = (datetime.now() - self._start_time).total_seconds()
        providers = {}
        for name, s in self._providers.items():
            providers[name] = {
                "total_requests": s.total,
                "successes": s.successes,
                "failures": dict(s.failures),
                "total_attempts": s.attempts,
                "avg_seconds": round(s.total_seconds / s.total, 3) if s.total else 0.0,
            }
        return {
            "providers": providers,
            "uptime_seconds": round(uptime, 1),
        }
