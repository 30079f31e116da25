"""Trading signal generation."""
from smartwhale.services.signals.service import (SignalService, build_signals,
                                                 signal_stats)
from smartwhale.services.signals.whale_flow import whale_flow_signals

__all__ = ["SignalService", "build_signals", "signal_stats", "whale_flow_signals"]
