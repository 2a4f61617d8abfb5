"""cardgen — trading-card generator backend for NFT characters."""

__version__ = "0.1.0"

from cardgen.service import CardService  # noqa: E402

__all__ = ["CardService", "__version__"]
