"""Reflxy pattern insight engine"""

__version__ = "0.1.0"
