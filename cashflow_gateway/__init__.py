"""Household cashflow projections under optimistic and pessimistic scenarios"""

__version__ = "0.1.0"
