"""Data stores for caching.

Stores handle:
- Redis: caching, TTL policies

No pricing logic in stores - that belongs in services.
"""
