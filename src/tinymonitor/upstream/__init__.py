"""Access to the upstream device status page."""

from .fetcher import UpstreamFetcher

__all__ = ["UpstreamFetcher"]
