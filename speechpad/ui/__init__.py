"""Client side: HTTP clients, state reducer, controller and Streamlit front end."""
