"""
geocoder-registry — declarative configuration for pluggable geocoding providers.

File: src/geocoder_registry/__init__.py

Purpose
- Package root. Exposes the version and keeps import time free of side effects.

Functional requirements
- Must not load configuration or initialize logging at import time.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
