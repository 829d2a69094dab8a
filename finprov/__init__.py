"""Configuration, parameter checking and home-directory setup for a finality provider daemon."""

__version__ = "0.1.0"

__all__ = ["__version__"]