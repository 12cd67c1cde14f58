"""
AIMY client package.

Provides:
- Typed generation options and request envelope for an Ollama-style /api/generate server
- A streaming HTTP transport with a bounded NDJSON decoder
- An interactive chat loop (``aimy`` console script)
"""

__version__ = "0.1.20"
