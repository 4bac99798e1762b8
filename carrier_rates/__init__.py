"""
carrier_rates - normalized shipping-rate quotes from external carrier APIs.
"""

__version__ = "0.1.0"
