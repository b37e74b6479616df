"""
Environment-driven settings for stack_safe.

    export STACK_SAFE_TRACE=1              # per-step debug records from drivers
    export STACK_SAFE_FRAME_BYTES=16       # run_bounded bytes per Python frame
    export STACK_SAFE_MIN_THREAD_STACK=262144
"""

import os


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


TRACE_STEPS = _env_flag("STACK_SAFE_TRACE")

# run_bounded expresses its budget in bytes; each Python frame costs this much.
FRAME_BYTES = _env_int("STACK_SAFE_FRAME_BYTES", 16)

# Native stack reserved per budgeted frame of a bounded worker thread.
NATIVE_FRAME_BYTES = 4096

MIN_THREAD_STACK_BYTES = _env_int("STACK_SAFE_MIN_THREAD_STACK", 256 * 1024)

MAX_THREAD_STACK_BYTES = 256 * 1024 * 1024

# Thread stack sizes must be page multiples on some platforms.
THREAD_STACK_ALIGNMENT = 4096
