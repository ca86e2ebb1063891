"""Data models and pure helpers.

This package contains:
- types: Dataclasses for bridge resources and the response envelope
- colour: sRGB <-> CIE xy conversion
- aggregate: Zone -> grouped light -> lights join
- utils: Name lookup, fuzzy matching, client construction
"""
