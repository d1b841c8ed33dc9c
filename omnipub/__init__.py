"""Bulk uploader that renders article JSON files and posts them to Omnipub."""

__version__ = "0.1.0"
