import sys
import os

import httpx
import pytest

# Ensure the project root is in sys.path so `from speechgate.main import create_app`
# works with relative imports inside the speechgate package
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from speechgate.config import Settings  # noqa: E402
from speechgate.main import create_app  # noqa: E402

UPSTREAM_URL = "http://upstream.test"


def wav_bytes(size: int) -> bytes:
    """A RIFF header padded with silence up to ``size`` bytes."""
    header = b"RIFF" + (size - 8).to_bytes(4, "little") + b"WAVE"
    return header + b"\x00" * max(0, size - len(header))


@pytest.fixture
def settings():
    """Simulated mode without the artificial latency."""
    return Settings(_env_file=None, simulated_delay_min=0.0, simulated_delay_max=0.0)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def make_proxy_app():
    """Build a proxy-mode app whose upstream is answered by ``handler``."""

    def _make(handler):
        proxy_settings = Settings(
            _env_file=None, recognition_mode="proxy", api_base_url=UPSTREAM_URL
        )
        return create_app(proxy_settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def make_wav():
    return wav_bytes
