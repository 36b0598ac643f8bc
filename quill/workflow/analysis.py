"""Glue to the external text analysis service.

The engine never waits for the analysis: :py:class:`quill.workflow.logic.TriggerAnalysis` hands the submission id to
the configured dispatcher (``QUILL_ANALYSIS_DISPATCHER``), which eventually runs :py:func:`run_analysis`; this calls
the configured client (``QUILL_ANALYSIS_CLIENT``) and feeds the outcome back to the engine.
"""

import abc
import dataclasses
import logging
from typing import Any, Dict, Union

import requests
from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string
from django_q.tasks import async_task

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class AnalysisResult:
    """Scores computed by the analysis service; the engine stores them without interpreting them."""

    overall_score: float
    sub_scores: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class AnalysisFailure:
    reason: str


AnalysisOutcome = Union[AnalysisResult, AnalysisFailure]


class BaseAnalysisClient(abc.ABC):
    @abc.abstractmethod
    def analyze(self, submission_id: int, content: str) -> AnalysisOutcome:
        """Analyze the content; service faults are returned as :py:class:`AnalysisFailure`, never raised."""


class HttpAnalysisClient(BaseAnalysisClient):
    """
    Client of the analysis HTTP API.

    The service receives ``{"submission_id": ..., "content": ...}`` as JSON and answers with
    ``{"overall_score": ..., "sub_scores": {...}}``.
    """

    def __init__(self, url: str = None, api_key: str = None, timeout: float = None):
        self.url = url or settings.QUILL_ANALYSIS_URL
        self.api_key = settings.QUILL_ANALYSIS_API_KEY if api_key is None else api_key
        self.timeout = timeout or settings.QUILL_ANALYSIS_TIMEOUT

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def analyze(self, submission_id: int, content: str) -> AnalysisOutcome:
        try:
            response = requests.post(
                self.url,
                json={"submission_id": submission_id, "content": content},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout:
            return AnalysisFailure(f"Analysis service did not answer within {self.timeout} seconds.")
        except requests.HTTPError as e:
            return AnalysisFailure(f"Analysis service answered {e.response.status_code}: {e.response.text[:200]}")
        except requests.RequestException as e:
            return AnalysisFailure(f"Analysis service unreachable: {e}")

        try:
            payload = response.json()
            return AnalysisResult(
                overall_score=float(payload["overall_score"]),
                sub_scores=dict(payload.get("sub_scores") or {}),
            )
        except (ValueError, TypeError, KeyError) as e:
            return AnalysisFailure(f"Malformed analysis payload: {e!r}")


def get_analysis_client() -> BaseAnalysisClient:
    return import_string(settings.QUILL_ANALYSIS_CLIENT)()


def run_analysis(submission_id: int) -> None:
    """
    Analyze a submission and report the outcome to the engine.

    Runs out of the request cycle (django-q2 worker by default).
    """
    from . import commands
    from .repository import get_repository
    from .storage import get_blob_storage

    submission = get_repository().get_submission(submission_id)
    content = get_blob_storage().retrieve(submission.content_ref).decode("utf-8")
    outcome = get_analysis_client().analyze(submission_id, content)
    if isinstance(outcome, AnalysisFailure):
        logger.warning(f"Analysis of submission {submission_id} failed: {outcome.reason}")
    result = commands.handle_analysis_result(submission_id, outcome)
    if not result.ok:
        logger.warning(f"Analysis outcome of submission {submission_id} not recorded: {result.message}")


def dispatch_with_django_q(submission_id: int) -> None:
    """Queue the analysis once the current transaction is committed."""
    transaction.on_commit(lambda: async_task(run_analysis, submission_id))


def dispatch_inline(submission_id: int) -> None:
    """Run the analysis right away, in the current process."""
    run_analysis(submission_id)


def get_analysis_dispatcher():
    return import_string(settings.QUILL_ANALYSIS_DISPATCHER)
