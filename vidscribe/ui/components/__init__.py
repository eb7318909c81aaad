"""Streamlit display components."""
