"""
counter_program.config — runtime configuration for the host ledger and CLI.

The processor itself reads no configuration: everything it needs arrives with
the request (program id, account handles, invoke context). This module feeds
the *host* side: which program id the counter is deployed at, the rent
parameters, signature enforcement, and logging.

Environment variables (all optional):
  COUNTER_PROGRAM_ID                   -> 32-byte hex (default: sha3_256(b"counter/program_id/v1"))
  COUNTER_RENT_LAMPORTS_PER_BYTE_YEAR  -> integer (default: 3480)
  COUNTER_RENT_EXEMPTION_THRESHOLD     -> float (default: 2.0)
  COUNTER_VERIFY_SIGNATURES            -> 0/1/true/false (default: 1)
  COUNTER_LOG_FORMAT                   -> json | text (default: auto)
  COUNTER_LOG_LEVEL                    -> DEBUG/INFO/... (default: INFO)

Programmatic usage:
    from counter_program.config import get_config
    cfg = get_config()
    ledger = Ledger.from_config(cfg)
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Dict, Mapping, Optional, Union

from .runtime.accounts import parse_hex_address
from .runtime.rent import DEFAULT_EXEMPTION_THRESHOLD, DEFAULT_LAMPORTS_PER_BYTE_YEAR, Rent

DEFAULT_PROGRAM_ID: bytes = hashlib.sha3_256(b"counter/program_id/v1").digest()

# ----------------------------- helpers -------------------------------------

_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    return bool(v) if v != "" else default


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class RentConfig:
    lamports_per_byte_year: int = DEFAULT_LAMPORTS_PER_BYTE_YEAR
    exemption_threshold: float = DEFAULT_EXEMPTION_THRESHOLD

    def to_rent(self) -> Rent:
        return Rent(self.lamports_per_byte_year, self.exemption_threshold)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    json: Optional[bool] = None


@dataclass(frozen=True)
class CounterConfig:
    program_id: bytes
    rent: RentConfig
    verify_signatures: bool
    logging: LoggingConfig

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["program_id"] = "0x" + self.program_id.hex()
        return d


# ------------------------------ loader --------------------------------------


def _validate(cfg: CounterConfig) -> CounterConfig:
    if cfg.rent.lamports_per_byte_year < 0:
        raise ValueError("lamports_per_byte_year must be >= 0")
    if cfg.rent.exemption_threshold < 0:
        raise ValueError("exemption_threshold must be >= 0")
    if cfg.logging.level not in _LOG_LEVELS:
        raise ValueError(f"unknown log level: {cfg.logging.level!r}")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, float, bool, bytes]]] = None,
) -> CounterConfig:
    """
    Build a CounterConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys supported:
          'program_id', 'lamports_per_byte_year', 'exemption_threshold',
          'verify_signatures', 'log_level', 'log_json'
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    raw_pid = overrides.get("program_id", env.get("COUNTER_PROGRAM_ID"))
    program_id = DEFAULT_PROGRAM_ID if raw_pid is None else parse_hex_address(raw_pid, name="program_id")  # type: ignore[arg-type]

    rent = RentConfig(
        lamports_per_byte_year=int(
            overrides.get(
                "lamports_per_byte_year",
                env.get("COUNTER_RENT_LAMPORTS_PER_BYTE_YEAR", DEFAULT_LAMPORTS_PER_BYTE_YEAR),
            )
        ),
        exemption_threshold=float(
            overrides.get(
                "exemption_threshold",
                env.get("COUNTER_RENT_EXEMPTION_THRESHOLD", DEFAULT_EXEMPTION_THRESHOLD),
            )
        ),
    )

    if "verify_signatures" in overrides:
        verify = bool(overrides["verify_signatures"])
    else:
        verify = _bool_env(env.get("COUNTER_VERIFY_SIGNATURES"), True)

    fmt = str(overrides.get("log_json", env.get("COUNTER_LOG_FORMAT", ""))).strip().lower()
    log_json = {"json": True, "true": True, "text": False, "false": False}.get(fmt)

    logging_cfg = LoggingConfig(
        level=str(overrides.get("log_level", env.get("COUNTER_LOG_LEVEL", "INFO"))).strip().upper(),
        json=log_json,
    )

    return _validate(
        CounterConfig(
            program_id=program_id,
            rent=rent,
            verify_signatures=verify,
            logging=logging_cfg,
        )
    )


@lru_cache(maxsize=1)
def get_config() -> CounterConfig:
    """Cached process config for the CLI and other application entrypoints."""
    return load_config()


def summary(cfg: Optional[CounterConfig] = None) -> str:
    """One-line summary of the important knobs."""
    cfg = cfg or get_config()
    return (
        "counter{"
        f"program=0x{cfg.program_id.hex()[:16]}…, "
        f"rent={cfg.rent.lamports_per_byte_year}x{cfg.rent.exemption_threshold:g}, "
        f"verify_sigs={int(cfg.verify_signatures)}, log={cfg.logging.level}"
        "}"
    )


__all__ = [
    "DEFAULT_PROGRAM_ID",
    "RentConfig",
    "LoggingConfig",
    "CounterConfig",
    "load_config",
    "get_config",
    "summary",
]
