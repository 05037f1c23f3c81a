"""
Data Ingestion Module

Fetches, normalizes and validates daily price history for the risk panel:
- yfinance for OHLCV price data
- DataFrame / provider rows -> PriceSeries
- In-memory candle cache with explicit TTL and invalidation
"""

__version__ = "0.1.0"
