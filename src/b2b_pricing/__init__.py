"""
B2B Pricing Package

Tiered quantity pricing and request-for-quote workflow for a B2B catalog.
Resolves unit prices using Quantity → Band → Price with default-price fallback.
"""

__version__ = "1.0.0"
