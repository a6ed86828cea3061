"""
Price data module.

Parsing of raw price rows into observations and the pluggable price
source adapters the backtester fetches historical series from.
"""
