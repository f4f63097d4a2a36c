"""
Declarative data-quality rule engine for silver-layer warehouse tables.
"""

__version__ = "0.1.0"
