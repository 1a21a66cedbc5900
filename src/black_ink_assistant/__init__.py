"""Black Ink studio assistant: multi-agent RAG chat service."""

__version__ = "1.0.0"
