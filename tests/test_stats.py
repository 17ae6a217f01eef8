"""Tests for per-provider generation statistics."""

from nova_llm.stats import GenerationStats


class TestGenerationStats:
    def test_empty(self):
        stats = GenerationStats()
        summary = stats.summary()
        assert summary["providers"] == {}
        assert summary["uptime_seconds"] >= 0
        assert stats.success_rate("ollama") is None

    def test_records_per_provider(self):
        stats = GenerationStats()
        stats.record_success("ollama", 1.0, attempts=2)
        stats.record_failure("ollama", "validation", 3.0, attempts=3)
        stats.record_success("openai", 0.5)

        providers = stats.summary()["providers"]
        assert providers["ollama"] == {
            "total_requests": 2,
            "successes": 1,
            "failures": {"validation": 1},
            "total_attempts": 5,
            "avg_seconds": 2.0,
        }
        assert providers["openai"]["successes"] == 1
        assert stats.success_rate("ollama") == 0.5
        assert stats.success_rate("openai") == 1.0

    def test_failures_by_category(self):
        stats = GenerationStats()
        stats.record_failure("ollama", "network", 0.1)
        stats.record_failure("ollama", "network", 0.1)
        stats.record_failure("ollama", "extraction", 0.1)
        failures = stats.summary()["providers"]["ollama"]["failures"]
        assert failures == {"network": 2, "extraction": 1}
