"""
Haystack FI
Marketplace connecting financial institutions with technology vendors.
"""

__version__ = "0.1.0"
