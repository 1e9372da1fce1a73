"""Utility helpers."""
from listing_categorizer.utils.price_parser import PriceInfo, parse_price

__all__ = ["PriceInfo", "parse_price"]
