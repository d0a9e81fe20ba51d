"""
                        Services Module

Contains the persistence services with the hybrid architecture pattern:
a Mock implementation (development) and a real one (production).

Services:
    - orders: order store (in-memory or MongoDB)
"""

from app.services.orders import get_order_store

__all__ = ["get_order_store"]
