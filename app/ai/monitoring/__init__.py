"""
Monitoring Module - usage counters for model calls.

    from app.ai.monitoring import ai_metrics
    ai_metrics.record(response)
"""

from app.ai.monitoring.metrics import AIMetrics, AggregatedMetrics, ai_metrics

__all__ = ["AIMetrics", "AggregatedMetrics", "ai_metrics"]
