import os

import pytest
from fastapi.testclient import TestClient

# No Redis in tests: the lifespan skips the ARQ pool and history/reflections are off
# unless a test installs a mock pool on app.state.
os.environ["ENABLE_REFLECTION_JOBS"] = "false"
os.environ.pop("INTERNAL_API_KEY", None)

from asrar.limiter import limiter  # noqa: E402
from asrar.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
