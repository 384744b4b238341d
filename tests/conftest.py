"""
Shared test fixtures for the Pine Script bot.
"""

import pytest


class FakeProvider:
    """Quote provider that answers with canned text instead of calling out."""

    name = "fake"

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def fetch_text(self, prompt, symbol):
        self.prompts.append((prompt, symbol))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"
