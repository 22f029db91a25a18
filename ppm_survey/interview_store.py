"""Interview store: the CRUD collaborator that holds interview records.

Two implementations share the :class:`InterviewStore` contract:

* :class:`InMemoryInterviewStore` – a thread-safe ``dict`` (tests, scripts).
* :class:`HttpInterviewStore` – a client for the interview REST service
  (``/interviews`` endpoints) built on ``httpx``.
"""
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ppm_survey.catalog import FORM_IDS
from ppm_survey.exceptions import InterviewStoreError
from ppm_survey.interview import AnswerSet, Interview


class InterviewStore(Protocol):
    def list_interviews(self) -> List[Interview]: ...

    def get_interview(self, interview_id: str) -> Interview: ...

    def create_interview(
        self,
        *,
        is_interviewer: bool,
        interviewer_name: Optional[str] = None,
        respondent_name: Optional[str] = None,
        respondent_department: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> Interview: ...

    def save_answers(self, interview_id: str, form_id: str, answers: AnswerSet) -> Interview: ...

    def complete_interview(
        self, interview_id: str, config_snapshot: Optional[Any] = None
    ) -> Interview: ...

    def delete_interview(self, interview_id: str) -> None: ...


def _check_form_id(form_id: str) -> None:
    if form_id not in FORM_IDS:
        raise ValueError(f"Unknown form id: {form_id!r}")


class InMemoryInterviewStore:
    """A thread-safe store for interview records held in memory."""

    def __init__(self) -> None:
        self._interviews: Dict[str, Interview] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_locked(self, interview_id: str) -> Interview:
        interview = self._interviews.get(interview_id)
        if interview is None:
            raise InterviewStoreError(
                f"Interview with ID {interview_id} not found.", status_code=404
            )
        return interview

    def list_interviews(self) -> List[Interview]:
        """Returns all interviews in creation order."""
        with self._lock:
            return list(self._interviews.values())

    def get_interview(self, interview_id: str) -> Interview:
        with self._lock:
            return self._get_locked(interview_id)

    def create_interview(
        self,
        *,
        is_interviewer: bool,
        interviewer_name: Optional[str] = None,
        respondent_name: Optional[str] = None,
        respondent_department: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> Interview:
        interview = Interview(
            interview_id=str(uuid.uuid4()),
            is_interviewer=is_interviewer,
            interviewer_name=interviewer_name,
            respondent_name=respondent_name,
            respondent_department=respondent_department,
            created_at=created_at,
        )
        with self._lock:
            self._interviews[interview.interview_id] = interview
        self._logger.info(
            "interview_created", extra={"interview_id": interview.interview_id}
        )
        return interview

    def save_answers(self, interview_id: str, form_id: str, answers: AnswerSet) -> Interview:
        _check_form_id(form_id)
        with self._lock:
            interview = self._get_locked(interview_id)
            interview.set_answers(form_id, answers)
            return interview

    def complete_interview(
        self, interview_id: str, config_snapshot: Optional[Any] = None
    ) -> Interview:
        with self._lock:
            interview = self._get_locked(interview_id)
            interview.complete(config_snapshot)
        self._logger.info("interview_completed", extra={"interview_id": interview_id})
        return interview

    def delete_interview(self, interview_id: str) -> None:
        with self._lock:
            self._get_locked(interview_id)
            del self._interviews[interview_id]

    def count(self) -> int:
        """Returns the total number of stored interviews."""
        with self._lock:
            return len(self._interviews)


class HttpInterviewStore:
    """Client for the interview REST service.

    Every transport failure, non-2xx status or non-JSON body surfaces as
    :class:`InterviewStoreError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        self._logger.debug("Interview API %s %s", method, path)
        try:
            response = self._client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            raise InterviewStoreError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            raise InterviewStoreError(
                f"HTTP {response.status_code} for {method} {path}: {response.text[:200]}",
                status_code=response.status_code,
            )
        if response.status_code == 204:
            return None
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise InterviewStoreError(f"Response to {method} {path} is not JSON: {content_type}")
        try:
            return response.json()
        except ValueError as exc:
            raise InterviewStoreError(f"Invalid JSON from {method} {path}: {exc}") from exc

    def list_interviews(self) -> List[Interview]:
        data = self._request("GET", "/interviews")
        return [Interview.from_api(item) for item in data]

    def get_interview(self, interview_id: str) -> Interview:
        return Interview.from_api(self._request("GET", f"/interviews/{interview_id}"))

    def create_interview(
        self,
        *,
        is_interviewer: bool,
        interviewer_name: Optional[str] = None,
        respondent_name: Optional[str] = None,
        respondent_department: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> Interview:
        payload: Dict[str, Any] = {"isInterviewer": is_interviewer}
        optional = {
            "interviewerName": interviewer_name,
            "respondentName": respondent_name,
            "respondentDepartment": respondent_department,
            "createdAt": created_at,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return Interview.from_api(self._request("POST", "/interviews", payload))

    def save_answers(self, interview_id: str, form_id: str, answers: AnswerSet) -> Interview:
        _check_form_id(form_id)
        data = self._request(
            "PUT",
            f"/interviews/{interview_id}/answers",
            {"formId": form_id, "answers": answers},
        )
        return Interview.from_api(data)

    def complete_interview(
        self, interview_id: str, config_snapshot: Optional[Any] = None
    ) -> Interview:
        data = self._request(
            "PUT",
            f"/interviews/{interview_id}/complete",
            {"configSnapshot": config_snapshot},
        )
        return Interview.from_api(data)

    def delete_interview(self, interview_id: str) -> None:
        self._request("DELETE", f"/interviews/{interview_id}")
