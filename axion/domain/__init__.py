"""
Domain package for Axion.

Exports the active-record `Model` base class and its chained query type.
Keep this package focused on entity definitions and row mapping.
"""

from axion.domain.models import Model, ModelQuery, utc_timestamp

__all__ = [
    "Model",
    "ModelQuery",
    "utc_timestamp",
]
