import pytest

from mc_option_pricer.gbm import SimulationParameters

ENV_VARS = (
    "MC_PRICER_WORKERS",
    "MC_PRICER_BATCH_SIZE",
    "MC_PRICER_BACKEND",
    "MC_PRICER_SEED",
)


@pytest.fixture(autouse=True)
def _clean_engine_env(monkeypatch):
    """Keep MC_PRICER_* overrides from the shell out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def params():
    """S0=100, sigma=20%, T=1 year, daily steps."""
    return SimulationParameters(s0=100, sigma=0.2, t=1.0, steps=252)


@pytest.fixture
def rate():
    return 0.05
