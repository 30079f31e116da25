"""Alchemy provider."""
from smartwhale.providers.alchemy.provider import AlchemyProvider, AssetTransfer

__all__ = ["AlchemyProvider", "AssetTransfer"]
