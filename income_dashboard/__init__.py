"""Income dashboard: loaders, scales, marks and views shared by the Dash and Streamlit front ends."""

__version__ = "0.1.0"
