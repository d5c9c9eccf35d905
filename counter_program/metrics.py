"""
counter_program.metrics — Prometheus counters & histograms for the counter program and host ledger.

* Centralized registry: callers use `get_registry()` / `generate_latest_text()`
  to expose metrics, or inject their own with `set_registry()` before first use.
* Helpers: `observe_instruction(...)` and `time_transaction()` cover the
  entrypoint and ledger paths.

Exposed metrics (names are prefixed with `counter_program_`):
  - instructions_total{op,result}      : Counter — entrypoint calls by operation and outcome
  - instruction_errors_total{code}     : Counter — rejected instructions by error code
  - tx_seconds{result}                 : Histogram — ledger time to process a transaction

Labels:
  - op     ∈ {initialize, increment, close, unknown}
  - result ∈ {success, failed}
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

_PREFIX = "counter_program_"

_OPS = {0: "initialize", 1: "increment", 2: "close"}


def _buckets_from_env(name: str, default: Iterable[float]) -> Iterable[float]:
    raw = os.getenv(name)
    if not raw:
        return default
    out = []
    for tok in raw.split(","):
        tok = tok.strip()
        if not tok:
            continue
        try:
            out.append(float(tok))
        except ValueError:
            continue
    return out or default


_TX_SECONDS_BUCKETS = tuple(
    _buckets_from_env(
        "COUNTER_METRICS_TX_SECONDS_BUCKETS",
        # 50µs .. 1s
        (0.00005, 0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
    )
)


# ------------------------------ registry ------------------------------------


@dataclass
class _Metrics:
    instructions_total: Counter
    instruction_errors_total: Counter
    tx_seconds: Histogram


_registry: Optional[CollectorRegistry] = None
_metrics: Optional[_Metrics] = None


def _build(reg: CollectorRegistry) -> _Metrics:
    return _Metrics(
        instructions_total=Counter(
            _PREFIX + "instructions_total",
            "Counter program instructions processed (by operation and result).",
            labelnames=("op", "result"),
            registry=reg,
        ),
        instruction_errors_total=Counter(
            _PREFIX + "instruction_errors_total",
            "Rejected counter program instructions (by error code).",
            labelnames=("code",),
            registry=reg,
        ),
        tx_seconds=Histogram(
            _PREFIX + "tx_seconds",
            "Wall time for the ledger to process one transaction.",
            labelnames=("result",),
            buckets=_TX_SECONDS_BUCKETS,
            registry=reg,
        ),
    )


def set_registry(registry: CollectorRegistry) -> None:
    """
    Bind metrics to `registry` (e.g., an app-global one), replacing any
    previously bound registry.
    """
    global _registry, _metrics
    _registry = registry
    _metrics = _build(registry)


def get_registry() -> CollectorRegistry:
    """Return the metrics registry, creating a private one on first use."""
    if _registry is None:
        set_registry(CollectorRegistry())
    return _registry  # type: ignore[return-value]


def _m() -> _Metrics:
    if _metrics is None:
        set_registry(CollectorRegistry())
    return _metrics  # type: ignore[return-value]


# ------------------------------ helpers -------------------------------------


def op_label(data: Union[bytes, bytearray, memoryview]) -> str:
    """Operation label for a raw payload (opcode byte), 'unknown' if undecodable."""
    if len(data) == 0:
        return "unknown"
    return _OPS.get(data[0], "unknown")


def observe_instruction(*, op: str, success: bool, code: Optional[str] = None) -> None:
    """Record one entrypoint call."""
    m = _m()
    m.instructions_total.labels(op=op, result="success" if success else "failed").inc()
    if not success:
        m.instruction_errors_total.labels(code=code or "UNKNOWN").inc()


@dataclass
class _TxTimer:
    h: Histogram
    t0: float = field(default_factory=time.perf_counter)
    result: str = "success"

    def fail(self) -> None:
        self.result = "failed"

    def __enter__(self) -> "_TxTimer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.result = "failed"
        self.h.labels(result=self.result).observe(max(0.0, time.perf_counter() - self.t0))


def time_transaction() -> _TxTimer:
    """
    Context manager timing one ledger transaction.

    Example:
        with time_transaction() as timer:
            ...
            timer.fail()   # label the observation as failed
    """
    return _TxTimer(h=_m().tx_seconds)


# ------------------------------ exposition ----------------------------------


def generate_latest_text() -> bytes:
    """Prometheus exposition format for the current registry."""
    return generate_latest(get_registry())


__all__ = [
    "CONTENT_TYPE_LATEST",
    "get_registry",
    "set_registry",
    "op_label",
    "observe_instruction",
    "time_transaction",
    "generate_latest_text",
]
