"""Streamlit client: capture, upload, and result display."""
