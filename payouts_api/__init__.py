"""Lobby Payouts backend - prize calculation and report API.

This package provides a hexagonal architecture implementation around the
``payouts`` core.

Layers:
- application: Use cases, settings service and port interfaces
- infrastructure: Adapters for the inference service and report/settings stores
- api: REST and WebSocket endpoints
"""

__version__ = "1.0.0"
