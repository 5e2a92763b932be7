"""
                Cuisine Ordering Client

Client-side core of a food-ordering app: catalog browsing with
pagination and top dishes, a persisted cart with tax computation,
payment submission and a short recent-orders history.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
