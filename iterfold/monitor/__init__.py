from .events import MonitorEvent, Recorder, log_effect
from .log import Log

__all__ = ("Log", "MonitorEvent", "Recorder", "log_effect")
