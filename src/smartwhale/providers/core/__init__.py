"""Core provider abstractions."""
from smartwhale.providers.core.base import DEFAULT_TIMEOUT, HttpProviderABC
from smartwhale.providers.core.error_mapper import (PROVIDER_EXCEPTIONS,
                                                   ProviderErrorMapper)
from smartwhale.providers.core.exceptions import (ProviderNotConfiguredError,
                                                  UpstreamError)
from smartwhale.providers.core.utils import (hex_to_int, normalize_address,
                                             normalize_coin_id, round2,
                                             wei_to_eth)

__all__ = [
    "DEFAULT_TIMEOUT",
    "HttpProviderABC",
    "PROVIDER_EXCEPTIONS",
    "ProviderErrorMapper",
    "ProviderNotConfiguredError",
    "UpstreamError",
    "hex_to_int",
    "normalize_address",
    "normalize_coin_id",
    "round2",
    "wei_to_eth",
]
