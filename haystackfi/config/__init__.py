"""
Client configuration.
"""
