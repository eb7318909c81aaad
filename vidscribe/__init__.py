"""VidScribe: record or upload a short video, transcribe it, and tag it."""

__version__ = "0.1.0"
