"""Quarry simulation tools: rock data loading, terrain meshes, accessory definitions and vehicle controls."""

__version__ = "0.1.0"

__all__ = ["accessory", "defs_io", "heightfield", "rocks", "vehicle"]