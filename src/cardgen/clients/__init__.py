"""Clients for the external services: OpenSea, OpenAI and GoAPI."""

from cardgen.clients.goapi import GoAPIClient, build_imagine_payload
from cardgen.clients.openai_client import CardAIClient
from cardgen.clients.opensea import OpenSeaClient

__all__ = ["CardAIClient", "GoAPIClient", "OpenSeaClient", "build_imagine_payload"]
