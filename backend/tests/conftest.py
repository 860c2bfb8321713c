import os
import sys
import pathlib

import pytest

BASE_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DOTENV_DISABLED", "1")

from snap2html.config import Settings  # noqa: E402


class FakeModelClient:
    """Stands in for the v0 endpoint; records every call."""

    def __init__(self, text="<html><body>ok</body></html>", exc=None, on_call=None):
        self.text = text
        self.exc = exc
        self.on_call = on_call
        self.calls = []

    async def generate(self, messages, *, temperature, max_output_tokens):
        self.calls.append(
            {"messages": list(messages), "temperature": temperature, "max_output_tokens": max_output_tokens}
        )
        if self.on_call is not None:
            self.on_call()
        if self.exc is not None:
            raise self.exc
        return self.text


@pytest.fixture
def upload_dir(tmp_path) -> pathlib.Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(upload_dir) -> Settings:
    return Settings(api_key="test-key", upload_dir=str(upload_dir))


@pytest.fixture
def fake_model() -> FakeModelClient:
    return FakeModelClient()
