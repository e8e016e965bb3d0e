"""
Logging configuration and utilities for the analytics core.
"""
from .config import configure_logging, get_logger, get_simulation_logger

__all__ = ["configure_logging", "get_logger", "get_simulation_logger"]
