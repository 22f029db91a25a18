import datetime
import json
import logging
from typing import Any, Dict, List, Optional, Union

from ppm_survey.catalog import FORM_IDS

logger = logging.getLogger(__name__)

AnswerSet = Dict[str, Union[str, List[str]]]


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def encode_answers(answers: AnswerSet) -> str:
    """Serialize an answer set into the opaque blob stored per form."""
    return json.dumps(answers, ensure_ascii=False)


def decode_answers(blob: Optional[str]) -> AnswerSet:
    """Deserialize a stored answer blob.

    Raises
    ------
    ValueError
        If *blob* is not valid JSON or does not hold a JSON object.
    """
    if blob is None or not blob.strip():
        return {}
    data = json.loads(blob)
    if not isinstance(data, dict):
        raise ValueError("Answer blob must hold a JSON object")
    return data


class Interview:
    """One respondent's answer session across the three forms.

    The per-form answers are kept exactly as the store holds them at rest:
    serialized blobs. :py:meth:`answers_for` and :py:meth:`form_answers`
    deserialize them before they enter the scoring pipeline.
    """

    def __init__(
        self,
        interview_id: str,
        is_interviewer: bool = False,
        interviewer_name: Optional[str] = None,
        respondent_name: Optional[str] = None,
        respondent_department: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.interview_id: str = interview_id
        self.is_interviewer: bool = is_interviewer
        self.interviewer_name: Optional[str] = interviewer_name
        self.respondent_name: Optional[str] = respondent_name
        self.respondent_department: Optional[str] = respondent_department
        self.created_at: str = created_at or utc_now_iso()
        self.updated_at: str = self.created_at
        self.answer_blobs: Dict[str, Optional[str]] = {form_id: None for form_id in FORM_IDS}
        self.is_completed: bool = False
        self.completed_at: Optional[str] = None
        self.config_snapshot: Optional[Any] = None

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def has_answers(self, form_id: str) -> bool:
        blob = self.answer_blobs.get(form_id)
        return bool(blob and blob.strip())

    def answers_for(self, form_id: str) -> AnswerSet:
        """Return the decoded answers of *form_id* (raises ``ValueError`` if corrupt)."""
        return decode_answers(self.answer_blobs.get(form_id))

    def form_answers(self) -> Dict[str, AnswerSet]:
        """Return ``{"f1": {...}, "f2": {...}, "f3": {...}}`` for scoring.

        A corrupt blob is logged and read as an empty answer set.
        """
        result: Dict[str, AnswerSet] = {}
        for form_id in FORM_IDS:
            try:
                result[form_id] = self.answers_for(form_id)
            except ValueError as exc:
                logger.warning(
                    "Unreadable %s answers for interview %s: %s",
                    form_id,
                    self.interview_id,
                    exc,
                )
                result[form_id] = {}
        return result

    def set_answers(self, form_id: str, answers: AnswerSet) -> None:
        self.answer_blobs[form_id] = encode_answers(answers)
        self.updated_at = utc_now_iso()

    def complete(self, config_snapshot: Optional[Any] = None) -> None:
        self.is_completed = True
        self.completed_at = utc_now_iso()
        self.config_snapshot = config_snapshot
        self.updated_at = self.completed_at

    # ------------------------------------------------------------------
    # API representation (camelCase, as the interview REST service speaks)
    # ------------------------------------------------------------------

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Interview":
        interview = cls(
            interview_id=str(payload["id"]),
            is_interviewer=bool(payload.get("isInterviewer", False)),
            interviewer_name=payload.get("interviewerName"),
            respondent_name=payload.get("respondentName"),
            respondent_department=payload.get("respondentDepartment"),
            created_at=payload.get("createdAt"),
        )
        interview.updated_at = payload.get("updatedAt") or interview.created_at
        for form_id in FORM_IDS:
            blob = payload.get(f"{form_id}Answers")
            # some servers inline the JSON instead of returning the stored text
            if isinstance(blob, dict):
                blob = encode_answers(blob)
            interview.answer_blobs[form_id] = blob
        interview.is_completed = bool(payload.get("isCompleted", False))
        interview.completed_at = payload.get("completedAt")
        interview.config_snapshot = payload.get("configSnapshot")
        return interview

    def to_api(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.interview_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isInterviewer": self.is_interviewer,
            "interviewerName": self.interviewer_name,
            "respondentName": self.respondent_name,
            "respondentDepartment": self.respondent_department,
            "isCompleted": self.is_completed,
            "completedAt": self.completed_at,
            "configSnapshot": self.config_snapshot,
        }
        for form_id in FORM_IDS:
            payload[f"{form_id}Answers"] = self.answer_blobs.get(form_id)
        return payload

    def __repr__(self) -> str:
        parts = [
            f"interview_id='{self.interview_id}'",
            f"created_at='{self.created_at}'",
            f"is_completed={self.is_completed}",
        ]
        if self.respondent_name:
            parts.append(f"respondent_name='{self.respondent_name}'")
        answered = [f for f in FORM_IDS if self.has_answers(f)]
        if answered:
            parts.append(f"forms={answered}")
        return f"Interview({', '.join(parts)})"
