from pathlib import Path

import pytest

from udr_core.config_runtime import reset_runtime_config
from udr_core.logging_monitoring import reset_logging

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def clean_runtime(monkeypatch):
    for name in ("UDR_CONFIG", "UDR_STRICT_FEATURES", "UDR_ENCODING", "UDR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_runtime_config()
    yield
    reset_runtime_config()
    reset_logging()


@pytest.fixture
def example_path():
    return DATA_DIR / "example.conllu"