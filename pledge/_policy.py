"""
Builder policy — behavior configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace


# ═══════════════════════════════════════════════════════════════════════════════
# Policy — Full Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Builder policy configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            Policy()
            .with_discarded(level=logging.ERROR)
            .with_trace()
        )
        builder = PromiseBuilder(policy)

    Note: Immutable — each method returns new Policy.
    """

    # Failures nobody can observe: start() targets and merge inputs that
    # fail after the merge has already settled.
    report_discarded: bool = True
    discarded_level: int = logging.WARNING
    trace: bool = False

    def with_discarded(
        self,
        level: int | None = None,
        enabled: bool = True,
    ) -> Policy:
        """Configure reporting of discarded failures."""
        return replace(
            self,
            report_discarded=enabled,
            discarded_level=self.discarded_level if level is None else level,
        )

    def without_discarded(self) -> Policy:
        """Stay silent about discarded failures."""
        return replace(self, report_discarded=False)

    def with_trace(self, enabled: bool = True) -> Policy:
        """DEBUG-log every composed computation as it starts."""
        return replace(self, trace=enabled)

    def report(
        self,
        logger: logging.Logger,
        what: str,
        error: BaseException,
    ) -> None:
        """Log a failure that no observer will ever see."""
        if self.report_discarded:
            logger.log(
                self.discarded_level,
                "%s discarded failure: %r",
                what,
                error,
                exc_info=error,
            )


DEFAULT = Policy()


__all__ = ("Policy", "DEFAULT")
