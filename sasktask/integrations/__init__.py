"""Outbound service clients.

Each client implements ``BaseIntegration``; an unconfigured client never
makes a network call.
"""

from sasktask.integrations.ai_client import AIClient
from sasktask.integrations.base import BaseIntegration

__all__ = [
    "AIClient",
    "BaseIntegration",
]
