"""
Recovery Intelligence Engine.

Multi-provider consensus analysis and temporal risk prediction for
post-operative recovery tracking.
"""

__version__ = "0.1.0"
