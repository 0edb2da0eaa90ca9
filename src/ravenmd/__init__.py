"""ravenmd: typed objects, traits and references from markdown vaults."""

__version__ = "0.1.0"
