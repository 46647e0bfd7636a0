"""
ta_engine - incremental technical-analysis indicators and analyzers.

Candles flow into a CandleStore, indicator builders consume them one at a
time (or replay a batch), and analyzers keep a newest-first history of
indicator snapshots that strategies query through predicates.
"""

__version__ = "0.1.0"
