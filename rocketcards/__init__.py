"""
RocketCards - Collectible Card Game Match Engine

A deterministic, rules-driven engine for turn-based card matches.
The engine loads card collections and provides:
- Profile and deck building with rarity copy limits
- Seeded, reproducible match setup
- Phase, card play and turn transitions as pure state transforms
- Local and LLM-backed opponent policies
- Snapshot persistence for resuming matches
"""

__version__ = "0.1.0"
