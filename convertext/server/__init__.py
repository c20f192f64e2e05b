"""ConverText HTTP API (FastAPI). Run with ``convertext-server``."""
