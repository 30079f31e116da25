"""Service helpers: TTL cache and WebSocket streaming."""
from smartwhale.services.utils.cache import TTLCache
from smartwhale.services.utils.stream_handler import (handle_websocket_stream,
                                                      parse_symbols_param)

__all__ = ["TTLCache", "handle_websocket_stream", "parse_symbols_param"]
