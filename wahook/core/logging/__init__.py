"""Logging module for wahook."""

from .logger import get_logger, setup_app_logging

__all__ = ["get_logger", "setup_app_logging"]
