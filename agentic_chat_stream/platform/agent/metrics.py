"""Agent-specific Prometheus metrics.

Tracks agent run durations, in-flight runs, model token usage and tool call
latency/errors. Metrics are registered on the default registry and exposed
through the /metrics endpoint.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from time import monotonic
from typing import NamedTuple

import prometheus_client

from agentic_chat_stream.platform.observability.metrics import BUCKETS


class AgentMetricsLabels(NamedTuple):
    agent: str


class ToolMetricsLabels(NamedTuple):
    agent: str
    tool_name: str
    proxy_tool_name: str = ""


agent_run_histogram = prometheus_client.Histogram(
    name="agent_run_duration_seconds",
    documentation="Agent run duration (seconds)",
    labelnames=AgentMetricsLabels._fields + ("status",),
    buckets=BUCKETS,
)

agent_active_runs = prometheus_client.Gauge(
    name="agent_active_runs",
    documentation="Agent runs currently in progress",
    labelnames=AgentMetricsLabels._fields,
)

agent_tokens_counter = prometheus_client.Counter(
    name="agent_llm_tokens",
    documentation="LLM tokens consumed by agents",
    labelnames=("agent", "model", "direction"),
)

tool_call_histogram = prometheus_client.Histogram(
    name="agent_tool_call_duration_seconds",
    documentation="Tool call duration (seconds)",
    labelnames=ToolMetricsLabels._fields,
    buckets=BUCKETS,
)

tool_call_errors_counter = prometheus_client.Counter(
    name="agent_tool_call_errors",
    documentation="Failed tool calls",
    labelnames=ToolMetricsLabels._fields,
)


@asynccontextmanager
async def collect_agent_metrics(labels: AgentMetricsLabels) -> AsyncIterator[None]:
    """Record duration, outcome and concurrency of one agent run.

    Args:
        labels: Labels identifying the agent
    """
    agent_active_runs.labels(*labels).inc()
    start_time = monotonic()
    status = "error"
    try:
        yield
        status = "success"
    finally:
        agent_active_runs.labels(*labels).dec()
        agent_run_histogram.labels(*labels, status).observe(monotonic() - start_time)


def record_agent_tokens(agent: str, model: str, input_tokens: int, output_tokens: int) -> None:
    """Add token usage of one model call to the token counters."""
    if input_tokens:
        agent_tokens_counter.labels(agent, model, "input").inc(input_tokens)
    if output_tokens:
        agent_tokens_counter.labels(agent, model, "output").inc(output_tokens)


def record_tool_call(labels: ToolMetricsLabels, duration: float, error: bool = False) -> None:
    """Record the latency of a tool call, counting it as an error if it failed."""
    tool_call_histogram.labels(*labels).observe(duration)
    if error:
        tool_call_errors_counter.labels(*labels).inc()


@asynccontextmanager
async def collect_tool_metrics(labels: ToolMetricsLabels) -> AsyncIterator[None]:
    """Time a tool call and record it, marking raised exceptions as errors."""
    start_time = monotonic()
    try:
        yield
    except Exception:
        record_tool_call(labels, duration=monotonic() - start_time, error=True)
        raise
    record_tool_call(labels, duration=monotonic() - start_time)
