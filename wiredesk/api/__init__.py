"""
API module initialization.
"""
