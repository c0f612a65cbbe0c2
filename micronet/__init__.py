"""Micronet wireless instrument protocol: frames, decoding, encoding, network slots, slave device logic and a compass helper."""

__version__ = "0.1.0"