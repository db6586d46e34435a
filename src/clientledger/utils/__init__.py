"""Utility functions for clientledger."""

from clientledger.utils.amount_parser import parse_amount
from clientledger.utils.date_parser import parse_timestamp

__all__ = ["parse_amount", "parse_timestamp"]
