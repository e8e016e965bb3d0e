"""
Data ingestion and normalization module.

Price bar and investment plan models, provider payload parsing, series
validation and plan normalization.
"""
