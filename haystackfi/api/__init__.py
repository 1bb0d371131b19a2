"""
Marketplace REST API
FastAPI service backing the Haystack FI marketplace.
"""
