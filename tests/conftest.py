import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from podcast_engine.config import Settings  # noqa: E402
from podcast_engine.providers.config import ENV_KEYS, MODEL_ENV_KEYS  # noqa: E402


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials from the host environment out of the tests."""
    for name in [*ENV_KEYS.values(), *MODEL_ENV_KEYS.values(), "OLLAMA_BASE_URL"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    def _make(**values) -> Settings:
        return Settings(_env_file=None, **values)  # pyright: ignore[reportCallIssue]

    return _make
