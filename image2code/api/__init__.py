"""
HTTP API for image-to-code generation.
"""

from image2code.api.app import create_app

__all__ = ["create_app"]
