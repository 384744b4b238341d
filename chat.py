# chat.py
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from engine import LevelError, LevelSet, generate_levels
from quote_llm import QuoteError, fetch_approx_price

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I can generate a Pine Script for you. Please enter an asset symbol "
    "to get started (e.g., BTCUSD, AAPL)."
)
GENERIC_ERROR = "An unexpected error occurred. Please try again."

HOW_TO_STEPS = [
    ("Copy the Script", "Click the copy icon on the generated code block to copy the entire script to your clipboard."),
    ("Open TradingView", "Navigate to your chart on TradingView.com (https://www.tradingview.com/chart/)."),
    ("Open Pine Editor", 'At the bottom of the chart screen, click on the "Pine Editor" tab.'),
    ("Paste the Script", "Delete any existing content in the editor and paste the script you copied earlier."),
    ("Add to Chart", 'Click the "Add to Chart" button located above the editor. The trend lines will now appear on your chart!'),
]


@dataclass
class Message:
    id: int
    sender: str  # "user" or "bot"
    text: str
    level_set: Optional[LevelSet] = None
    is_error: bool = False


class ChatSession:
    """
    One user's conversation. Each submission fetches a price, builds a new
    LevelSet and appends exactly one bot reply; failures become replies too.
    """

    def __init__(self, price_fetcher: Callable[[str], float] = None):
        self._price_fetcher = price_fetcher or fetch_approx_price
        self._ids = itertools.count(1)
        self.messages: List[Message] = [self._message("bot", GREETING)]
        self.is_loading = False
        self.current_levels: Optional[LevelSet] = None

    def _message(self, sender: str, text: str, **kwargs) -> Message:
        return Message(id=next(self._ids), sender=sender, text=text, **kwargs)

    def submit(self, text: str) -> Optional[Message]:
        """Handle one symbol submission. Returns the bot reply, or None if ignored."""
        symbol = (text or "").strip()
        if not symbol or self.is_loading:
            return None

        self.is_loading = True
        self.messages.append(self._message("user", symbol))

        try:
            price = self._price_fetcher(symbol)
            level_set = generate_levels(price, symbol)
        except (LevelError, QuoteError) as e:
            reply = self._message("bot", str(e), is_error=True)
        except Exception as e:
            logger.exception("Error in bot response generation for %s", symbol)
            reply = self._message("bot", str(e) or GENERIC_ERROR, is_error=True)
        else:
            self.current_levels = level_set
            reply = self._message(
                "bot", f"Here is the Pine Script for {level_set.symbol}:", level_set=level_set
            )
        finally:
            self.is_loading = False

        self.messages.append(reply)
        return reply
