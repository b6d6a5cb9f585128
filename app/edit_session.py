"""
In-place editing of the tailored resume.

Each editing surface keeps a working copy of the canonical document. Every
change lands in the working copy at once; the canonical result only sees it
on commit (the field losing focus), and each commit re-scores once.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Sequence

from document import Key, get_at_path, set_at_path
from reconciler import Scorer, reconcile_store
from result_store import ResultStore


class EditSession:
    def __init__(
        self,
        store: ResultStore,
        job_description: str,
        scorer: Optional[Scorer] = None,
        status_callback: Callable[[str], None] | None = None,
    ):
        self.store = store
        self.job_description = job_description
        self.scorer = scorer
        self.status_callback = status_callback
        self._seed = None
        self._working = None
        self._dirty = False

    def _sync(self) -> None:
        # reseed whenever the canonical document is a different object
        canonical = self.store.document
        if canonical is not self._seed:
            self._seed = canonical
            self._working = canonical
            self._dirty = False

    @property
    def working_copy(self) -> Optional[Dict[str, Any]]:
        self._sync()
        return self._working

    @property
    def dirty(self) -> bool:
        self._sync()
        return self._dirty

    def value(self, path: Sequence[Key]) -> Any:
        return get_at_path(self.working_copy, path)

    def on_field_change(self, path: Sequence[Key], text: str) -> None:
        """Record a keystroke-level edit in the working copy only."""
        self._sync()
        if self._working is None:
            raise RuntimeError("no document to edit")
        if get_at_path(self._working, path) == text:
            return
        self._working = set_at_path(self._working, path, text)
        self._dirty = True

    def on_field_commit(self) -> bool:
        """Push the working copy to the canonical result and re-score it.

        The document is replaced before scoring starts, so a scoring failure
        keeps the edit; the error is raised and the store reports a stale score.
        Returns False when there was nothing to commit.
        """
        self._sync()
        if not self._dirty:
            return False
        if self._working == self._seed:
            # edited back to what it was
            self._working = self._seed
            self._dirty = False
            return False

        self.store.replace_document(self._working)
        self._seed = self._working
        self._dirty = False
        return reconcile_store(
            self.store,
            self.job_description,
            scorer=self.scorer,
            status_callback=self.status_callback,
        )
