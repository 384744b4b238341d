# engine.py
import math
from dataclasses import dataclass
from typing import Dict, Tuple


LEVEL_LABELS: Tuple[str, ...] = ("Level -2", "Level -1", "Base Level", "Level +1", "Level +2")
MIN_BASE = 2


class LevelError(ValueError):
    """Raised when a price is too low to place five levels around it."""


@dataclass(frozen=True)
class LevelSet:
    symbol: str
    base_price: float
    base: int
    raw_levels: Tuple[int, ...]
    adjusted_levels: Tuple[int, ...]
    script: str

    def labelled_levels(self) -> Dict[str, int]:
        return dict(zip(LEVEL_LABELS, self.adjusted_levels))


# ---------- LEVEL MATH ----------

def square_root_base(base_price: float) -> int:
    """
    floor(sqrt(base_price)) computed on integers, so large prices
    never land one off because of float rounding.
    """
    return math.isqrt(int(base_price))


def raw_square_levels(base: int) -> Tuple[int, ...]:
    return tuple((base + offset) ** 2 for offset in range(-2, 3))


def make_odd(level: int) -> int:
    return level + 1 if level % 2 == 0 else level


# ---------- SCRIPT RENDERING ----------

PINE_TEMPLATE = """//@version=5
indicator("Perfect Square Trendlines (Generated)", overlay=true)

// Generated for symbol: {symbol} around price: {price}
// Base perfect square root: {base}
// Logic: If a calculated level is an even number, 1 is added to it.

{plots}"""


def format_price(price: float) -> str:
    """
    Whole prices print without a trailing '.0' (100.0 -> '100'); from 1e21 up
    the exponent form is kept (1e+21), as a browser would print it.
    """
    if float(price).is_integer() and abs(price) < 1e21:
        return str(int(price))
    return repr(float(price))


def render_pine_script(symbol: str, base_price: float, base: int, levels: Tuple[int, ...]) -> str:
    """
    Render the TradingView indicator for five adjusted levels, lowest first.
    """
    if len(levels) != len(LEVEL_LABELS):
        raise ValueError(f"Expected {len(LEVEL_LABELS)} levels, got {len(levels)}")

    plots = []
    for label, level in zip(LEVEL_LABELS, levels):
        width = 3 if label == "Base Level" else 2
        plots.append(
            f'plot({level}, "{label}", color=color.white, style=plot.style_line, linewidth={width})'
        )

    return PINE_TEMPLATE.format(
        symbol=symbol.upper(),
        price=format_price(base_price),
        base=base,
        plots="\n".join(plots),
    )


# ---------- LEVEL GENERATION ----------

def generate_levels(base_price: float, symbol: str) -> LevelSet:
    """
    Map a price and symbol to five perfect-square levels plus a Pine Script.

    Raises LevelError when floor(sqrt(base_price)) < 2, i.e. the price is
    below 4. At exactly 4 the adjusted levels are 1, 1, 5, 9, 17.
    """
    if not symbol or not symbol.strip():
        raise ValueError("Symbol must be a non-empty string")
    if not math.isfinite(base_price):
        raise ValueError(f"Price must be a finite number, got {base_price!r}")

    symbol = symbol.strip().upper()
    base = square_root_base(base_price) if base_price >= 0 else 0

    if base < MIN_BASE:
        raise LevelError(f"price too low for symbol {symbol} (must be >= 4)")

    raw = raw_square_levels(base)
    adjusted = tuple(make_odd(level) for level in raw)

    return LevelSet(
        symbol=symbol,
        base_price=base_price,
        base=base,
        raw_levels=raw,
        adjusted_levels=adjusted,
        script=render_pine_script(symbol, base_price, base, adjusted),
    )
