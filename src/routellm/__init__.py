"""routellm: per-request routing between a strong and a weak language model."""

__version__ = "0.1.0"
