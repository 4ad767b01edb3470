"""Security - request throttling for any remotely exposed entry point

Components:
    ratelimit.py: Fixed-window rate limiter keyed by client identity
"""
