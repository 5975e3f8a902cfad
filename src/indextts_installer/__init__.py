"""
IndexTTS installer package.

This package hosts the client-side installation controller, the host service
that performs the actual installation work, and the presentation layers
(CLI and desktop UI) built on top of the controller.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
