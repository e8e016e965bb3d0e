"""
Utility functions module.

Calendar helpers for weekly resampling and contribution scheduling, and
small numeric helpers shared by the feature and simulation engines.
"""
