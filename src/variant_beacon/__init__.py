"""GA4GH Beacon backed by a BigQuery variants table."""

__version__ = "0.1.0"
