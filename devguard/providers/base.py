"""Provider base class - capability contract for ecosystem-specific checks."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from ..core.scanner import Category, Issue

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a provider's marker probe."""
    detected: bool
    evidence: Optional[str] = None

    @classmethod
    def found(cls, evidence: str) -> "DetectionResult":
        return cls(detected=True, evidence=evidence)

    @classmethod
    def not_found(cls, evidence: Optional[str] = None) -> "DetectionResult":
        return cls(detected=False, evidence=evidence)


class Provider(ABC):
    """Abstract base class for providers (Supabase, Vercel, Stripe).

    Subclasses set ``name`` and ``category`` and implement ``probe`` and
    ``run_checks``. Gating by enable/detect/force is done by the dispatcher,
    never by the provider itself.
    """

    name: str = ""
    category: Category

    def is_enabled(self, config: "Config") -> bool:
        """Read the provider's ``enabled`` toggle."""
        return config.providers.get(self.name).enabled

    def detect(self, ctx: "RepoContext") -> DetectionResult:
        """Probe the repository for provider markers.

        Errors while probing are treated as "not detected".
        """
        try:
            return self.probe(ctx)
        except Exception as e:
            logger.debug("%s detection failed: %s", self.name, e)
            return DetectionResult.not_found(f"detection failed: {e}")

    @abstractmethod
    def probe(self, ctx: "RepoContext") -> DetectionResult:
        """Cheap, read-only check for directories, manifest entries or env keys."""
        pass

    @abstractmethod
    async def run_checks(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        """Run the provider's substantive checks.

        Args:
            ctx: Repository context
            config: Resolved configuration

        Returns:
            Issues in the provider's category
        """
        pass
