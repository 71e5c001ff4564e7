"""User-mediated resolution of sync conflicts.

A conflict happens when a page was edited locally and W's copy changed since
the last sync, so W refused the push. Nothing is merged: the user picks which
side wins, or keeps both versions diverged until they sort it out by hand.
"""

import logging

from .errors import PageError
from .models import ConflictChoice, OutcomeStatus, PageOutcome
from .prompts import DecisionSource
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


class ConflictResolver:
    """Asks which version of a conflicting page to keep and applies it.

    Choices:
    - BOTH (default): do nothing, local and remote stay diverged
    - SERVER: force pull, discarding local edits
    - LOCAL: force push, discarding the intervening remote edit

    Failures of the forced operation are reported in the returned outcome,
    never raised, so one page cannot abort a batch.

    Example:
        >>> resolver = ConflictResolver(reconciler, RichPrompts())
        >>> outcome = resolver.resolve("welcome")
        >>> print(outcome.message)
    """

    OPTIONS = [
        ("Both (keep conflict)", ConflictChoice.BOTH.value),
        ("Server (force pull)", ConflictChoice.SERVER.value),
        ("Local (force push)", ConflictChoice.LOCAL.value),
    ]

    def __init__(self, reconciler: Reconciler, decisions: DecisionSource):
        self.reconciler = reconciler
        self.decisions = decisions

    def ask(self, page_id: str) -> ConflictChoice:
        """Ask which version of the page should be kept."""
        answer = self.decisions.choose(
            f"Which version of {page_id!r} should be kept?",
            self.OPTIONS,
            default=ConflictChoice.BOTH.value,
            description="Compare the two versions before choosing",
        )
        try:
            return ConflictChoice(answer)
        except ValueError:
            logger.warning(f"Page {page_id}: unknown conflict choice {answer!r}, keeping both")
            return ConflictChoice.BOTH

    def resolve(self, page_id: str) -> PageOutcome:
        """Resolve a conflict on one page.

        Returns:
            CHANGED outcome if a forced operation succeeded, CONFLICT if both
            versions are kept, FAILED if the forced operation failed
        """
        choice = self.ask(page_id)
        logger.info(f"Page {page_id}: conflict resolution choice={choice.value}")

        if choice == ConflictChoice.SERVER:
            action = "force pull"
            operation = self.reconciler.pull_page
            success = "conflict resolved: successfully force pulled"
        elif choice == ConflictChoice.LOCAL:
            action = "force push"
            operation = self.reconciler.push_page
            success = "conflict resolved: successfully force pushed"
        else:
            return PageOutcome(page_id, OutcomeStatus.CONFLICT, "conflict: both versions kept")

        try:
            operation(page_id, force=True)
        except PageError as e:
            logger.error(f"Page {page_id}: {action} failed: {e}")
            return PageOutcome(
                page_id,
                OutcomeStatus.FAILED,
                f"conflict: error while trying to {action}: {e}",
            )
        return PageOutcome(page_id, OutcomeStatus.CHANGED, success)
