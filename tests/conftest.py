"""
Shared fixtures: a stand-in for the Gemini client's async models API.
"""
import json
import pytest
from types import SimpleNamespace


class FakeModels:
    """Records generate_content calls and answers with canned text or an error."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def make_gemini_client():
    """Build a fake client; pass `data` (JSON-encoded for you), raw `text`, or an `error`."""
    def factory(data=None, text=None, error=None):
        if data is not None:
            text = json.dumps(data)
        return SimpleNamespace(aio=SimpleNamespace(models=FakeModels(text=text, error=error)))
    return factory
