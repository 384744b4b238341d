"""
Tests for the Streamlit chat page, driven through streamlit's AppTest.
"""

import json
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

import config
from chat import GREETING, ChatSession

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")


def fixed_price(price):
    return lambda symbol: price


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.setattr(config, "SETTINGS_PATH", path)
    return path


def run_app(chat, theme="dark"):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.session_state["chat"] = chat
    at.session_state["theme"] = theme
    return at.run()


class TestChatPage:
    def test_greeting_rendered(self, settings_file):
        at = run_app(ChatSession(price_fetcher=fixed_price(100)))
        assert not at.exception
        assert at.title[0].value == "Pine Script Bot"
        assert at.chat_message[0].markdown[0].value == GREETING
        assert len(at.code) == 0

    def test_script_rendered_after_submission(self, settings_file):
        chat = ChatSession(price_fetcher=fixed_price(50000))
        reply = chat.submit("btcusd")

        at = run_app(chat)
        assert not at.exception
        assert len(at.chat_message) == 3
        assert at.chat_message[1].markdown[0].value == "btcusd"
        assert at.chat_message[2].markdown[0].value == "Here is the Pine Script for BTCUSD:"
        assert at.code[0].value == reply.level_set.script
        assert at.radio[0].value == "line"

    def test_error_rendered(self, settings_file):
        chat = ChatSession(price_fetcher=fixed_price(3.9))
        chat.submit("shib")

        at = run_app(chat)
        assert not at.exception
        assert at.error[0].value == "price too low for symbol SHIB (must be >= 4)"
        assert len(at.code) == 0

    def test_candle_chart_toggle(self, settings_file):
        chat = ChatSession(price_fetcher=fixed_price(100))
        chat.submit("AAPL")

        at = run_app(chat)
        at.radio[0].set_value("candlestick").run()
        assert not at.exception
        assert at.radio[0].value == "candlestick"


class TestThemeToggle:
    def test_toggle_persists_theme(self, settings_file):
        at = run_app(ChatSession(price_fetcher=fixed_price(100)), theme="dark")
        at.sidebar.button[0].click().run()

        assert not at.exception
        assert at.session_state["theme"] == "light"
        assert json.loads(settings_file.read_text()) == {"theme": "light"}
