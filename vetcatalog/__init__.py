"""
Catalog sharing between product vendors and veterinarian clients.
"""

__version__ = "0.1.0"
