"""
Logging and metrics for data-quality runs.
"""
