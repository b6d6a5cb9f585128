"""
Holder of the one canonical analysis result.

The result is treated as immutable: every change builds a new dict and swaps
it in with a single assignment, so readers never see half an update.

`token` identifies the current analysis. It changes when a result is loaded
or the store is reset, and callers capture it before a slow AI call so a
late answer for a discarded analysis can be dropped.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

_PATCHABLE = {"tailoredResume", "atsScore", "atsScoreExplanation", "keywordGaps", "jobTitleMismatch"}


class ResultStore:
    def __init__(self, result: Optional[Dict[str, Any]] = None):
        self._result = None
        self._token = object()
        self._scored_document = None
        self.revision = 0
        if result is not None:
            self.load(result)

    @property
    def result(self) -> Optional[Dict[str, Any]]:
        return self._result

    @property
    def document(self) -> Optional[Dict[str, Any]]:
        return self._result["tailoredResume"] if self._result else None

    @property
    def token(self) -> object:
        return self._token

    @property
    def score_stale(self) -> bool:
        """True when the shown score was computed for an older document."""
        return self._result is not None and self.document is not self._scored_document

    def is_current(self, token: object) -> bool:
        return token is self._token and self._result is not None

    def load(self, result: Dict[str, Any]) -> object:
        """Replace the canonical result wholesale and start a new session."""
        self._result = result
        self._scored_document = result["tailoredResume"]
        self._token = object()
        self.revision += 1
        return self._token

    def reset(self) -> None:
        self._result = None
        self._scored_document = None
        self._token = object()
        self.revision += 1

    def replace_document(self, document: Dict[str, Any]) -> None:
        """Swap in an edited document; score fields are left as they are."""
        if self._result is None:
            raise RuntimeError("no analysis result loaded")
        self._result = {**self._result, "tailoredResume": document}
        self.revision += 1

    def update(
        self,
        token: object,
        patch: Callable[[Dict[str, Any]], Dict[str, Any]],
        scored_document: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Apply ``patch(current_result)`` as one transition if `token` is still current.

        `scored_document` is the document the patch's score was computed for.
        Returns False (and changes nothing) for a stale token.
        """
        if not self.is_current(token):
            logger.info("Dropping result update for a discarded analysis")
            return False

        changes = patch(self._result)
        unknown = set(changes) - _PATCHABLE
        if unknown:
            raise KeyError(f"cannot patch result fields: {sorted(unknown)}")

        self._result = {**self._result, **changes}
        if scored_document is not None:
            self._scored_document = scored_document
        self.revision += 1
        return True
