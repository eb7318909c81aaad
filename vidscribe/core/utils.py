"""Shared utility functions for VidScribe."""

import logging
import re


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping text in LLM responses."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
    return text.strip()


def format_file_size(num_bytes: int) -> str:
    """Render a byte count as a human-readable size ("1.5 MB")."""
    if num_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    size = float(num_bytes)
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, 2):g} {units[index]}"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the server or UI process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
