"""HTTP surface of the relay."""

from funding_relay.api.app import create_app

__all__ = ["create_app"]
