"""
ccwallet - Cloud wallet engine: holdings, balances and coin selection.
"""

__version__ = "0.3.0"
