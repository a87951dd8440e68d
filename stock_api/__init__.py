"""HTTP access layer for the stock service."""

from stock_api.app import create_app

__all__ = ["create_app"]
