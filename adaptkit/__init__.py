"""adaptkit — adapt framework build output for shared-page deployment."""

__version__ = "0.1.0"
