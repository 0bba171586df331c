from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_PUZZLE = "mini-empty"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class SolverSettings:
    max_steps: Optional[int] = None    # tentative assignments; None = unlimited
    timeout: Optional[float] = None    # seconds; None = unlimited
    puzzle: str = DEFAULT_PUZZLE       # built-in puzzle used when none is given
    log_level: str = DEFAULT_LOG_LEVEL


def check_max_steps(value: int, name: str = "max_steps") -> int:
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def check_timeout(value: float, name: str = "timeout") -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _int_env(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    return check_max_steps(value, name)


def _float_env(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from e
    return check_timeout(value, name)


def resolve_settings(environ: Optional[Mapping[str, str]] = None) -> SolverSettings:
    env = os.environ if environ is None else environ
    return SolverSettings(
        max_steps=_int_env(env, "MINIDOKU_MAX_STEPS"),
        timeout=_float_env(env, "MINIDOKU_TIMEOUT"),
        puzzle=env.get("MINIDOKU_PUZZLE", "").strip() or DEFAULT_PUZZLE,
        log_level=(env.get("MINIDOKU_LOG_LEVEL", "").strip() or DEFAULT_LOG_LEVEL).upper(),
    )
