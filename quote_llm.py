# quote_llm.py

import logging
import math
import re
import textwrap
from typing import Optional, Protocol

import pandas as pd
import yfinance as yf
from google import genai
from google.genai import types as genai_types
from openai import OpenAI

import config

logger = logging.getLogger(__name__)


class QuoteError(ValueError):
    """The provider answered, but no usable positive price could be read from it."""


class QuoteServiceError(RuntimeError):
    """The provider could not be reached or refused the request."""


# ---------- 1. PROMPT + PARSING ----------

def build_price_prompt(symbol: str) -> str:
    return (
        f"What is the current price of the asset with the symbol {symbol}? "
        "Respond with only the numerical value, without any currency symbols, "
        "commas, or explanatory text."
    )


_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def extract_price(text: Optional[str], symbol: str) -> float:
    """
    Pull a price out of free-form model output.

    Everything but digits and '.' is stripped first, then the longest leading
    decimal is read, so "1.2.3" gives 1.2 and "$67,250.10" gives 67250.1.
    """
    cleaned = _NON_NUMERIC.sub("", text or "")
    match = _LEADING_NUMBER.match(cleaned)
    price = float(match.group(0)) if match else None

    if price is None or price <= 0 or not math.isfinite(price):
        raise QuoteError(
            f'Could not determine a valid price for "{symbol}". '
            "Please check the symbol and try again."
        )
    return price


# ---------- 2. PROVIDERS ----------

class QuoteProvider(Protocol):
    name: str

    def fetch_text(self, prompt: str, symbol: str) -> str:
        ...


class OpenAIQuoteProvider:
    """
    Chat-completions quote. With search enabled a search-preview model is
    used so the answer reflects live prices instead of training data.
    """

    name = "openai"

    def __init__(self, client=None, model: str = None, search_model: str = None, use_search: bool = None):
        self.use_search = config.QUOTE_USE_SEARCH if use_search is None else use_search
        self.model = model or config.OPENAI_MODEL
        self.search_model = search_model or config.OPENAI_SEARCH_MODEL
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not config.OPENAI_API_KEY:
                raise QuoteServiceError("OpenAI client not available. Set OPENAI_API_KEY.")
            self._client = OpenAI(api_key=config.OPENAI_API_KEY)
        return self._client

    def fetch_text(self, prompt: str, symbol: str) -> str:
        messages = [
            {"role": "system", "content": "You are a market data assistant. Answer with a single number."},
            {"role": "user", "content": textwrap.dedent(prompt).strip()},
        ]
        if self.use_search:
            completion = self.client.chat.completions.create(
                model=self.search_model,
                web_search_options={},
                messages=messages,
            )
        else:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.0,
            )
        return completion.choices[0].message.content or ""


class GeminiQuoteProvider:
    """Gemini quote, grounded with Google Search when search is enabled."""

    name = "gemini"

    def __init__(self, client=None, model: str = None, use_search: bool = None):
        self.use_search = config.QUOTE_USE_SEARCH if use_search is None else use_search
        self.model = model or config.GEMINI_MODEL
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not config.GEMINI_API_KEY:
                raise QuoteServiceError("Google AI not configured. Set GEMINI_API_KEY or GOOGLE_API_KEY.")
            self._client = genai.Client(api_key=config.GEMINI_API_KEY)
        return self._client

    def fetch_text(self, prompt: str, symbol: str) -> str:
        tools = [genai_types.Tool(google_search=genai_types.GoogleSearch())] if self.use_search else None
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(tools=tools),
        )
        return response.text or ""


class YFinanceQuoteProvider:
    """
    Last close from Yahoo Finance. Only a few recent bars are requested and
    nothing but the final close is kept.
    """

    name = "yfinance"

    def __init__(self, period: str = "5d", interval: str = "1d"):
        self.period = period
        self.interval = interval

    def fetch_text(self, prompt: str, symbol: str) -> str:
        raw = yf.download(symbol, period=self.period, interval=self.interval, auto_adjust=False, progress=False)

        if raw is None or raw.empty:
            return ""

        # yfinance sometimes returns (field, ticker) MultiIndex columns
        if isinstance(raw.columns, pd.MultiIndex):
            raw.columns = raw.columns.get_level_values(0)

        for col in ["Close", "Adj Close"]:
            if col in raw.columns:
                closes = pd.to_numeric(raw[col], errors="coerce").dropna()
                if not closes.empty:
                    return repr(float(closes.iloc[-1]))
        return ""


PROVIDERS = {
    "openai": OpenAIQuoteProvider,
    "gemini": GeminiQuoteProvider,
    "yfinance": YFinanceQuoteProvider,
}


def get_provider(name: str = None) -> QuoteProvider:
    name = (name or config.QUOTE_PROVIDER).lower()
    if name not in PROVIDERS:
        raise ValueError(f"Unknown quote provider {name!r}. Must be one of {sorted(PROVIDERS)}.")
    return PROVIDERS[name]()


# ---------- 3. PRICE LOOKUP ----------

def fetch_approx_price(symbol: str, provider: QuoteProvider = None) -> float:
    """
    Ask the provider for the current price of *symbol* and parse it.

    Raises QuoteError when the answer holds no positive number and
    QuoteServiceError when the provider call itself fails.
    """
    provider = provider or get_provider()
    prompt = build_price_prompt(symbol)

    try:
        text = provider.fetch_text(prompt, symbol)
    except QuoteServiceError:
        raise
    except Exception as e:
        logger.warning("Quote request for %s via %s failed: %s", symbol, provider.name, e)
        raise QuoteServiceError(f"Price service request failed for {symbol}: {e}") from e

    price = extract_price(text, symbol)
    logger.info("Quote for %s via %s: %s", symbol, provider.name, price)
    return price
