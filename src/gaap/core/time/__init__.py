from gaap.core.time.abc import Time
from gaap.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
