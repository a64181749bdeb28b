"""Convert UVTT / dd2vtt / Foundry VTT map exports into scene-store primitives."""

__version__ = "0.1.0"
