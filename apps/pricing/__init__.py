"""Pricing app package.

Holds the commercial terms of each property: general pricing settings,
seasonal price ranges with derived public rates, minimum stay rules and
operational costs, together with stay quotes and price range imports.
"""
