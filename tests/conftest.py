import logging
import os

import pytest

from envlab.core.config import reset_settings_cache
from envlab.core.logging.structured import set_experiment_context

# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "APP_ENV",
    "MODE",
    "LOG_LEVEL",
    "LOG_JSON",
    "SERVICE_NAME",
    "SIMULATION_TICK_MS",
    "SIMULATION_BATCH_SIZE",
    "RANDOM_SEED",
    "LOG_STREAM_CAPACITY",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables, the settings cache and log context between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    for k in _ENV_VARS_TO_ISOLATE:
        os.environ.pop(k, None)
    reset_settings_cache()
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        reset_settings_cache()
        set_experiment_context(None)


@pytest.fixture
def root_logger_isolation():
    """Restore root logger handlers and level after tests that reconfigure it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
