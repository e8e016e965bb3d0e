"""
Data models and contracts module.

Immutable result types produced by the feature and simulation engines.
"""
