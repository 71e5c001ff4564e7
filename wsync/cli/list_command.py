"""List command: pick the tracked pages among all pages of W."""

import logging
from typing import List

from .batch_command import BatchCommand
from .models import ExitCode, PageOutcome
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


class ListCommand(BatchCommand):
    """Offers every remote page in a multi-select pre-selected with the
    tracked ones, then adds the newly selected pages and removes the
    deselected ones. Tracked pages missing from W cannot be selected and
    are offered for removal.

    Each of the two changes is confirmed first. Both run on the database
    loaded at the start of the command, which is saved once at the end.
    """

    def run(self) -> ExitCode:
        return self.guarded("list", self._list)

    def _list(self) -> ExitCode:
        reconciler = self.open_reconciler()
        database = reconciler.database

        with self.output_handler.spinner("Fetching page list..."):
            remote_ids = reconciler.api.list_pages()
        logger.info(f"W has {len(remote_ids)} page(s)")

        tracked = [page_id for page_id in remote_ids if database.is_tracked(page_id)]
        gone = [page_id for page_id in database.tracked_ids() if page_id not in remote_ids]
        if gone:
            self.output_handler.warning(
                f"{len(gone)} tracked page(s) no longer exist on W: {', '.join(gone)}"
            )
        selected = self.decisions.select_many("Select pages to track", remote_ids, tracked)

        added = [page_id for page_id in selected if not database.is_tracked(page_id)]
        removed = [page_id for page_id in database.tracked_ids() if page_id not in selected]

        targets: List[str] = []
        if added and self.decisions.confirm(
            f"Add {len(added)} new page(s) to your local repo?",
            description=", ".join(added),
        ):
            targets.extend(added)
        if removed and self.decisions.confirm(
            f"Remove {len(removed)} page(s) from your local repo?",
            description=", ".join(removed),
        ):
            targets.extend(removed)

        if not targets:
            self.output_handler.print("Nothing to change")
            return ExitCode.SUCCESS

        to_add = set(added)

        def apply(reconciler: Reconciler, page_id: str) -> PageOutcome:
            if page_id in to_add:
                return self._add(reconciler, page_id)
            return self._remove(reconciler, page_id)

        report = self.run_pages("list", reconciler, targets, apply)
        self.output_handler.print_report(report)
        return report.exit_code()
