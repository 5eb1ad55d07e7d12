"""
Will Engine - clause resolution and will assembly

Turns an intake snapshot and stored clause selections into a will document.
"""
__version__ = "1.0.0"
