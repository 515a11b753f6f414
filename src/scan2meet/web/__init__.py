"""Streamlit web app."""
