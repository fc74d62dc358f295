"""
Frozen engine configuration.

Defaults can be overridden through environment variables:

    MC_PRICER_WORKERS     number of parallel workers
    MC_PRICER_BATCH_SIZE  paths drawn per vectorised batch inside a worker
    MC_PRICER_BACKEND     "thread", "process" or "sequential"
    MC_PRICER_SEED        integer root seed (unset means fresh entropy)
"""

import os
from dataclasses import dataclass, replace
from typing import Final, Mapping, Optional

#: Two-sided 95% normal critical value used for confidence intervals
CONFIDENCE_Z_95: Final[float] = 1.96

#: Paths drawn per vectorised batch; bounds per-worker memory
DEFAULT_BATCH_SIZE: Final[int] = 100_000

BACKENDS: Final[tuple[str, ...]] = ("thread", "process", "sequential")


def _default_workers() -> int:
    return os.cpu_count() or 1


def _parse_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class EngineConfig:
    """
    Execution settings for the Monte Carlo engine.

    Attributes
    ----------
    n_workers : int, optional
        Number of parallel workers; paths are split statically between them.
        None resolves to the CPU count.
    batch_size : int
        Maximum number of paths a worker draws in one vectorised block.
    backend : str
        Pool type: "thread", "process" or "sequential".
    seed : int, optional
        Root seed for the per-worker random streams. None draws fresh entropy.
    """

    n_workers: Optional[int] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    backend: str = "thread"
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.n_workers is None:
            object.__setattr__(self, "n_workers", _default_workers())
        if self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.backend not in BACKENDS:
            raise ValueError(
                f"backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from MC_PRICER_* environment variables."""
        env = os.environ if env is None else env
        kwargs = {}
        workers = _parse_int(env, "MC_PRICER_WORKERS")
        if workers is not None:
            kwargs["n_workers"] = workers
        batch_size = _parse_int(env, "MC_PRICER_BATCH_SIZE")
        if batch_size is not None:
            kwargs["batch_size"] = batch_size
        backend = env.get("MC_PRICER_BACKEND")
        if backend:
            kwargs["backend"] = backend.strip().lower()
        seed = _parse_int(env, "MC_PRICER_SEED")
        if seed is not None:
            kwargs["seed"] = seed
        return cls(**kwargs)

    def with_overrides(self, **overrides) -> "EngineConfig":
        """Return a copy with every non-None keyword applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self
