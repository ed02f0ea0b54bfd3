"""FastAPI backend exposing the transcription and save endpoints."""
