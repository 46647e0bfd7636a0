"""
Volume indicators package.

Indicators:
- Volume Ratio: current volume relative to its rolling average
- VWAP: volume weighted average of the typical price
"""

from .volume_ratio import Volume, VolumeBuilder, VolumesBuilderFactory
from .vwap import VWAP, VWAPBuilder, VWAPParams, VWAPsBuilderFactory

__all__ = [
    "Volume",
    "VolumeBuilder",
    "VolumesBuilderFactory",
    "VWAP",
    "VWAPBuilder",
    "VWAPParams",
    "VWAPsBuilderFactory",
]
