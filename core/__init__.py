"""Core functionality for Hue Home.

This package contains:
- client: BridgeClient for the CLIP v2 API
- config: BridgeConfig and credential loading
- errors: Failure taxonomy
- actions: Power, brightness, colour and toggle intents
- throttle: UpdateThrottle for colour streams
"""
