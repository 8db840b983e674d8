"""
main.py — Streamlit Navigation Controller
------------------------------------------

This script initializes the Venue Location Hierarchy Streamlit app and
registers its pages.

Dependencies:
- streamlit
"""

import streamlit as st

# --- Configure the main Streamlit app window ---
st.set_page_config(
    page_title="Venue Location Hierarchy",
    page_icon="🗺️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# --- Create the navigation sidebar ---
pg = st.navigation([
    st.Page("app/hierarchy_preview_ui.py", title="Location Hierarchy Preview", default=True),
])

# --- Run the selected page from the sidebar ---
pg.run()
