"""aoegwent: a two-player, best-of-three card-battle rules engine."""

__version__ = "0.1.0"
