"""Provider implementations for ecosystem-specific checks."""

from typing import List

from .base import DetectionResult, Provider
from .stripe import StripeProvider
from .supabase import SupabaseProvider
from .vercel import VercelProvider


def all_providers() -> List[Provider]:
    """Get one instance of every provider, in dispatch order."""
    return [
        SupabaseProvider(),
        VercelProvider(),
        StripeProvider(),
    ]


__all__ = [
    "DetectionResult",
    "Provider",
    "SupabaseProvider",
    "VercelProvider",
    "StripeProvider",
    "all_providers",
]
