"""
Snowball App - Technical Feature and Compounding Backtest Engine

Computes technical indicators and categorical signals from daily price
history, and simulates staged periodic investment plans against historical
prices or bootstrap-resampled future paths.
"""

__version__ = "0.1.0"
__author__ = "Snowball Team"
