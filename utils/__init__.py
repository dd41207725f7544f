"""
utils/ - Shared helpers: logging, dates, ids, formatting and errors.
"""
