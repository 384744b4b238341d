import streamlit as st

import config
from charts import CHART_TYPES, build_price_chart
from chat import HOW_TO_STEPS, ChatSession

config.configure_logging()

THEME_CSS = {
    "dark": """
<style>
    .stApp { background-color: #0f172a; color: #e2e8f0; }
    [data-testid="stSidebar"] { background-color: #1e293b; }
    [data-testid="stChatMessage"] { background-color: #1e293b; border: 1px solid #334155; }
</style>
""",
    "light": """
<style>
    .stApp { background-color: #f8fafc; color: #1e293b; }
    [data-testid="stSidebar"] { background-color: #e2e8f0; }
    [data-testid="stChatMessage"] { background-color: #ffffff; border: 1px solid #e2e8f0; }
</style>
""",
}

st.set_page_config(page_title="Pine Script Bot", page_icon="📈")

if "theme" not in st.session_state:
    st.session_state.theme = config.load_theme()
if "chat" not in st.session_state:
    st.session_state.chat = ChatSession()

chat: ChatSession = st.session_state.chat
theme = st.session_state.theme

st.markdown(THEME_CSS[theme], unsafe_allow_html=True)


def on_toggle_theme():
    st.session_state.theme = config.toggle_theme(st.session_state.theme)
    config.save_theme(st.session_state.theme)


with st.sidebar:
    next_theme = config.toggle_theme(theme)
    st.button(f"Switch to {next_theme} mode", on_click=on_toggle_theme)

    with st.expander("How to Use Pine Script in TradingView"):
        for number, (title, body) in enumerate(HOW_TO_STEPS, start=1):
            st.markdown(f"**{number}. {title}**  \n{body}")

st.title("Pine Script Bot")
st.caption("Chat to generate a TradingView script.")


def render_message(message):
    with st.chat_message("assistant" if message.sender == "bot" else "user"):
        if message.is_error:
            st.error(message.text)
        else:
            st.markdown(message.text)

        level_set = message.level_set
        if level_set is None:
            return

        st.code(level_set.script, language="javascript")

        chart_type = st.radio(
            "Chart", CHART_TYPES, horizontal=True, key=f"chart_type_{message.id}",
            format_func=lambda t: "Line" if t == "line" else "Candle",
        )
        fig = build_price_chart(
            level_set.base_price, level_set.adjusted_levels, theme=theme,
            chart_type=chart_type, seed=message.id,
        )
        st.plotly_chart(fig, key=f"chart_{message.id}")

        st.markdown("**How to use:**")
        st.markdown(
            "1. Click the copy button on the script block.\n"
            "2. Open your chart on [TradingView](https://www.tradingview.com/).\n"
            "3. Open the 'Pine Editor' tab at the bottom.\n"
            "4. Paste the script and click 'Add to Chart'."
        )


for message in chat.messages:
    render_message(message)

# submit() runs to completion before the rerun; ChatSession ignores input while loading
symbol = st.chat_input("Enter symbol (e.g., BTCUSD, AAPL)")
if symbol:
    with st.spinner("Fetching price and generating levels..."):
        chat.submit(symbol)
    st.rerun()
