"""
security/ - Handler decorators for the user whitelist and rate limiting.
"""
