"""Fee reconciliation engine for a single surcharge line item in a shop cart."""

__version__ = "1.0.0"
