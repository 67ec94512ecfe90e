"""
BrainBolt adaptive quiz engine.

Issues one question at a time per session, adapts difficulty to recent
performance, scores answers and keeps leaderboards, with a relational
database as source of truth and a key/value cache for fast reads.
"""

__version__ = "1.0.0"
