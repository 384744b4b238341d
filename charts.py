# charts.py
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go


CHART_TYPES = ("line", "candlestick")
CHART_HEIGHT = 250

PALETTES: Dict[str, Dict[str, str]] = {
    "dark": {
        "background": "#1e293b",
        "text": "#d1d5db",
        "grid": "#334155",
        "line": "#94a3b8",
        "up": "#22c55e",
        "down": "#ef4444",
        "support": "#22c55e",
        "resistance": "#ef4444",
        "base": "#d97706",
    },
    "light": {
        "background": "#ffffff",
        "text": "#1f2937",
        "grid": "#e5e7eb",
        "line": "#6b7280",
        "up": "#16a34a",
        "down": "#dc2626",
        "support": "#16a34a",
        "resistance": "#dc2626",
        "base": "#f59e0b",
    },
}


# ---------- PREVIEW DATA ----------

def generate_candles(base_price: float, count: int = 50, seed: Optional[int] = None,
                     end: Optional[datetime] = None) -> pd.DataFrame:
    """
    Synthetic daily OHLC bars wandering around *base_price*.
    Only used to give the level lines something to sit on.
    """
    rng = np.random.default_rng(seed)
    end = end or datetime.now()

    rows = []
    last_close = base_price * (1 + (rng.random() - 0.5) * 0.1)
    for i in range(count):
        open_ = last_close
        close = open_ + (rng.random() - 0.5) * (base_price * 0.02)
        high = max(open_, close) + rng.random() * (base_price * 0.01)
        low = min(open_, close) - rng.random() * (base_price * 0.01)
        rows.append({
            "time": end - timedelta(days=count - i),
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
        })
        last_close = close

    return pd.DataFrame(rows, columns=["time", "open", "high", "low", "close"])


def generate_line_data(candles: pd.DataFrame) -> pd.DataFrame:
    return candles[["time", "close"]].rename(columns={"close": "value"})


# ---------- LEVEL LINES ----------

def level_lines(levels: Sequence[int], theme: str = "dark") -> List[Dict]:
    """
    Label levels around the middle one: below are supports (S1 nearest),
    above are resistances (R1 nearest).
    """
    palette = PALETTES[theme]
    mid = len(levels) // 2

    lines = []
    for index, level in enumerate(levels):
        if index == mid:
            kind, title = "base", f"Base: {level:,}"
        elif index < mid:
            kind, title = "support", f"S{mid - index}: {level:,}"
        else:
            kind, title = "resistance", f"R{index - mid}: {level:,}"
        lines.append({"price": level, "kind": kind, "title": title, "color": palette[kind]})
    return lines


# ---------- FIGURE ----------

def build_price_chart(base_price: float, levels: Sequence[int], theme: str = "dark",
                      chart_type: str = "line", seed: Optional[int] = None) -> go.Figure:
    if chart_type not in CHART_TYPES:
        raise ValueError(f"Unknown chart type {chart_type!r}. Must be one of {CHART_TYPES}.")
    if theme not in PALETTES:
        raise ValueError(f"Unknown theme {theme!r}. Must be one of {tuple(PALETTES)}.")

    palette = PALETTES[theme]
    candles = generate_candles(base_price, seed=seed)

    fig = go.Figure()
    if chart_type == "line":
        line = generate_line_data(candles)
        fig.add_trace(go.Scatter(
            x=line["time"], y=line["value"], mode="lines",
            line=dict(color=palette["line"], width=2), name="Price",
        ))
    else:
        fig.add_trace(go.Candlestick(
            x=candles["time"], open=candles["open"], high=candles["high"],
            low=candles["low"], close=candles["close"],
            increasing_line_color=palette["up"], decreasing_line_color=palette["down"],
            name="Price",
        ))

    for line in level_lines(levels, theme):
        fig.add_hline(
            y=line["price"], line_dash="dash", line_width=2, line_color=line["color"],
            annotation_text=line["title"], annotation_position="right",
            annotation_font_color=line["color"],
        )

    fig.update_layout(
        height=CHART_HEIGHT,
        margin=dict(l=10, r=10, t=10, b=10),
        paper_bgcolor=palette["background"],
        plot_bgcolor=palette["background"],
        font=dict(color=palette["text"]),
        xaxis=dict(gridcolor=palette["grid"], rangeslider=dict(visible=False)),
        yaxis=dict(gridcolor=palette["grid"], side="right"),
        showlegend=False,
    )
    return fig
