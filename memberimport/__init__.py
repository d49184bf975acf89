"""Member Import - bulk member import pipeline for the church administration API."""

__version__ = "0.3.0"
