"""Backend relay for Dapp Portal payments."""

__version__ = "1.0.0"
