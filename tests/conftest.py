"""
Pytest configuration for covenant-service tests.
"""

import sys
from pathlib import Path

import pytest

# Добавляем src в sys.path для импортов без установки пакета
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from covenant_service.config import CovenantConfig  # noqa: E402
from covenant_service.system import CovenantSystem  # noqa: E402


# Настройка anyio для async тестов
@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def config():
    """Конфигурация без ретрай-задержек и без автозапуска агентов."""
    return CovenantConfig(
        boot_agents=False,
        retry_backoff_seconds=0.0,
        delegation_timeout_seconds=None,
        domain_registry_url=None,
    )


@pytest.fixture
def system(config):
    """Свежий CovenantSystem для каждого теста."""
    return CovenantSystem(config=config)
