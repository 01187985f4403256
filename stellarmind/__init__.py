"""StellarMind: recursive question/answer mind-maps generated by language models."""

__version__ = "0.2.0"
