"""
Larder - A kitchen assistant core.

Turns natural-language requests into operations on a user's pantry,
recipes, meal plans and grocery lists.
"""

__version__ = "0.1.0"
