"""Configuration and reference data for the dcvalue engine."""

from dcvalue.data.defaults import GlobalDefaults

__all__ = ["GlobalDefaults"]
