import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from keydungeon import create_app  # noqa: E402
from keydungeon.routes.dungeon_api import clear_cache  # noqa: E402

# Keep generation output deterministic regardless of the developer's shell.
for _var in [k for k in os.environ if k.startswith("KEYDUNGEON_") and k != "KEYDUNGEON_LOG_LEVEL"]:
    del os.environ[_var]


@pytest.fixture(scope="session")
def test_app():
    app = create_app({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()
