"""
                Order Management API

A small REST service for restaurant order lines (dish, price,
server, table) stored as MongoDB documents, with an in-memory
store for local development.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
