"""Service layer - audio capture/encoding, transcription and storage."""
