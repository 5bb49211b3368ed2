"""Request metadata enrichers."""

from authcore.infrastructure.enrichers.device_enricher import DeviceEnricher

__all__ = ["DeviceEnricher"]
