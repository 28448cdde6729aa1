"""
Gacha Simulator.

A weighted gacha engine: rarity sampling over a tiered pool, a timed roll
state machine, a persisted inventory and statistics ledger, and a debug flag
shared by every client context of a profile.
"""

__version__ = "0.1.0"
