"""HTTP surface."""

from cardgen.api.app import create_app

__all__ = ["create_app"]
