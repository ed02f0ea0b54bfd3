"""SpeechPad - record or upload audio, transcribe it, edit and save the text."""

__version__ = "0.1.0"
