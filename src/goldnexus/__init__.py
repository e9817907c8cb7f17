"""GoldNexus storefront backend: gold price cache and cookie-based JWT sessions."""

__version__ = "1.0.0"
