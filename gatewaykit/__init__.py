"""Helpers for Gateway API routes, gateway policy references, Istio mesh configuration and YAML manifest decoding."""

__version__ = "0.1.0"