"""Catalog search for the storefront products page."""
