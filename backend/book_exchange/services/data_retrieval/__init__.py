# backend/book_exchange/services/data_retrieval/__init__.py

"""
Data retrieval services package.

Wraps the queries and stored-function calls the matching engine depends on.
"""

from .exchange_data import ExchangeData

__all__ = ["ExchangeData"]
