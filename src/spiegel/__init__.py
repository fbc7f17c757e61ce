"""
Spiegel: step-by-step wizard controller

Walks a user through an ordered sequence of externally installed steps.
"""

try:
    from importlib.metadata import version
    __version__ = version("spiegel")
except Exception:
    __version__ = "0.0.0"  # Fallback for development

__all__ = ["__version__"]
