import os
import sys

import pandas as pd
import requests
import streamlit as st

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from frontend.api_client import GenerationClient
from frontend.config import API_URL

st.set_page_config(page_title="Status", layout="wide", page_icon="📊")

st.title("Service Status")
st.markdown("Backend health and the generation history of this browser session")

client = GenerationClient(API_URL)

col1, col2, col3 = st.columns(3)

try:
    health = client.health()
    with col1:
        st.metric("Backend", health.get("status", "unknown").upper(),
                  help="'degraded' means the model API key is missing")
    with col2:
        st.metric("Model", health.get("model", "N/A"))
    with col3:
        st.metric("W&B Tracking", "On" if health.get("tracking") else "Off")
except requests.exceptions.RequestException as e:
    st.error(f"Cannot reach backend at {API_URL}: {e}")

st.markdown("---")

col_styles, col_history = st.columns([1, 2])

with col_styles:
    st.subheader("🎨 Styles")
    try:
        catalog = client.styles()
        for style in catalog.get("styles", []):
            marker = " (default)" if style == catalog.get("default") else ""
            st.write(f"• {style}{marker}")
    except requests.exceptions.RequestException as e:
        st.error(f"Error fetching styles: {e}")

with col_history:
    st.subheader("Recent Attempts")
    session = st.session_state.get("session")
    attempts = session.state.attempts if session is not None else ()

    if attempts:
        successes = sum(1 for a in attempts if a.success)
        st.info(f"**{len(attempts)}** attempts, **{successes}** succeeded")

        df = pd.DataFrame([
            {
                "Operation": a.operation,
                "Style": a.style or "-",
                "Status": "✅" if a.success else "❌",
                "Error": a.error_type or "",
                "Time (ms)": a.elapsed_ms,
            }
            for a in reversed(attempts)
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No attempts yet in this session")

st.markdown("---")
if st.button("🔄 Refresh Now", use_container_width=True):
    st.rerun()
