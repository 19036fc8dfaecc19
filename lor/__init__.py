"""
League of Restaurant
Receipt-verified restaurant reviews.
"""

__version__ = "0.1.0"
