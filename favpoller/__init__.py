"""Poll a favorites API for businesses on a jittered, time-windowed schedule."""

from favpoller.core.signals import Signal
from favpoller.pipeline import poll_favorite_businesses

__all__ = ["Signal", "poll_favorite_businesses"]
