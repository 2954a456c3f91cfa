"""
AI Metrics - in-process usage counters for model calls.

Every proposal request records one entry: provider, tokens, latency and
whether the call succeeded. Timeouts are recorded as failures with no
tokens. The numbers are exposed for logging and tests; there is no
external metrics backend.
"""

from dataclasses import dataclass, field
from typing import Dict
from threading import Lock

from app.ai.providers.base import AIResponse


@dataclass
class AggregatedMetrics:
    """Totals since start-up (or the last reset)."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    total_latency_ms: float = 0.0
    requests_by_provider: Dict[str, int] = field(default_factory=dict)

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    def to_dict(self) -> Dict:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "prompt_tokens": self.total_prompt_tokens,
            "completion_tokens": self.total_completion_tokens,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "requests_by_provider": dict(self.requests_by_provider),
        }


class AIMetrics:
    """
    Thread-safe aggregation of model call outcomes.

    Usage:
        ai_metrics.record(response)
        ai_metrics.record_timeout("gemini")
        ai_metrics.get_stats().to_dict()
    """

    def __init__(self):
        self._lock = Lock()
        self._aggregated = AggregatedMetrics()

    def record(self, response: AIResponse) -> None:
        """Record a completed (successful or failed) call."""
        with self._lock:
            agg = self._aggregated
            agg.total_requests += 1
            if response.success:
                agg.successful_requests += 1
            else:
                agg.failed_requests += 1
            agg.total_prompt_tokens += response.usage.prompt_tokens
            agg.total_completion_tokens += response.usage.completion_tokens
            agg.total_latency_ms += response.latency_ms
            name = response.provider.value
            agg.requests_by_provider[name] = agg.requests_by_provider.get(name, 0) + 1

    def record_timeout(self, provider_name: str, latency_ms: float) -> None:
        """Record a call abandoned because it exceeded the timeout."""
        with self._lock:
            agg = self._aggregated
            agg.total_requests += 1
            agg.failed_requests += 1
            agg.total_latency_ms += latency_ms
            agg.requests_by_provider[provider_name] = agg.requests_by_provider.get(provider_name, 0) + 1

    def get_stats(self) -> AggregatedMetrics:
        """Snapshot of the current totals."""
        with self._lock:
            agg = self._aggregated
            return AggregatedMetrics(
                total_requests=agg.total_requests,
                successful_requests=agg.successful_requests,
                failed_requests=agg.failed_requests,
                total_prompt_tokens=agg.total_prompt_tokens,
                total_completion_tokens=agg.total_completion_tokens,
                total_latency_ms=agg.total_latency_ms,
                requests_by_provider=dict(agg.requests_by_provider),
            )

    def reset(self) -> None:
        """Reset all counters (used by tests)."""
        with self._lock:
            self._aggregated = AggregatedMetrics()


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_metrics = AIMetrics()
