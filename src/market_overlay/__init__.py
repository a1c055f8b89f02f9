"""Live market overlay — price ticker, sparklines and NFT sales feed."""

__version__ = "0.1.0"
