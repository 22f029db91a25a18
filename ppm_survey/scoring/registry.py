"""Weight registry: question and category weights with persisted overrides.

The application wires exactly one :class:`WeightRegistry` at startup (see
:func:`ppm_survey.app.build_registry`) and passes it by reference to the
scoring pipeline. Every mutation writes the full snapshot through a
:class:`WeightStore`, so the next process starts from the same weights.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from ppm_survey.exceptions import WeightsLoadError
from ppm_survey.scoring.weights import (
    AnalysisType,
    CategoryWeightEntry,
    WeightEntry,
    WeightSnapshot,
    default_snapshot,
)

__all__ = [
    "WEIGHTS_NAMESPACE",
    "WeightStore",
    "InMemoryWeightStore",
    "JsonFileWeightStore",
    "WeightRegistry",
    "load_registry",
]

logger = logging.getLogger(__name__)

# Key under which the snapshot lives in the key-value store
WEIGHTS_NAMESPACE = "ppm.weights"


class WeightStore(Protocol):
    """Persistence port for registry snapshots."""

    def load(self) -> WeightSnapshot:
        """Return the persisted snapshot or raise :class:`WeightsLoadError`."""
        ...

    def save(self, snapshot: WeightSnapshot) -> None:
        ...


def _decode(payload: Any, namespace: str) -> WeightSnapshot:
    if payload is None:
        raise WeightsLoadError(f"No persisted weights under '{namespace}'")
    try:
        return WeightSnapshot.from_dict(payload)
    except ValueError as exc:
        raise WeightsLoadError(f"Corrupt weights under '{namespace}': {exc}") from exc


class InMemoryWeightStore:
    """Key-value store held in a plain ``dict`` (tests, ephemeral processes)."""

    def __init__(self, namespace: str = WEIGHTS_NAMESPACE) -> None:
        self.namespace = namespace
        self.data: Dict[str, str] = {}

    def load(self) -> WeightSnapshot:
        raw = self.data.get(self.namespace)
        if raw is None:
            raise WeightsLoadError(f"No persisted weights under '{self.namespace}'")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise WeightsLoadError(f"Unreadable weights: {exc}") from exc
        return _decode(payload, self.namespace)

    def save(self, snapshot: WeightSnapshot) -> None:
        self.data[self.namespace] = json.dumps(snapshot.to_dict(), ensure_ascii=False)


class JsonFileWeightStore:
    """Key-value store backed by a JSON object on disk.

    The file maps namespaces to payloads, so other settings may share it.
    Writes go to a sibling temp file first and are swapped in with
    :func:`os.replace`.
    """

    def __init__(self, path: Union[str, Path], namespace: str = WEIGHTS_NAMESPACE) -> None:
        self.path = Path(path)
        self.namespace = namespace

    def _read_all(self) -> Dict[str, Any]:
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError("weights file must contain a JSON object")
        return data

    def load(self) -> WeightSnapshot:
        if not self.path.exists():
            raise WeightsLoadError(f"Weights file {self.path} does not exist")
        try:
            data = self._read_all()
        except (OSError, ValueError) as exc:
            raise WeightsLoadError(f"Unreadable weights file {self.path}: {exc}") from exc
        return _decode(data.get(self.namespace), self.namespace)

    def save(self, snapshot: WeightSnapshot) -> None:
        data: Dict[str, Any] = {}
        if self.path.exists():
            try:
                data = self._read_all()
            except (OSError, ValueError):
                logger.warning("Overwriting unreadable weights file %s", self.path)
        data[self.namespace] = snapshot.to_dict()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)


class WeightRegistry:
    """In-memory weight tables keyed by question id and by category name."""

    def __init__(
        self,
        snapshot: Optional[WeightSnapshot] = None,
        *,
        store: Optional[WeightStore] = None,
    ) -> None:
        """Create a registry seeded with *snapshot* (defaults if omitted).

        Args:
            snapshot: Initial content. ``None`` seeds the compiled-in tables.
            store: Optional persistence port written after every mutation.
        """
        self._questions: Dict[str, WeightEntry] = {}
        self._categories: Dict[str, CategoryWeightEntry] = {}
        self._store = store
        self._replace_all(snapshot or default_snapshot())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_question_weight(self, question_id: str) -> Optional[WeightEntry]:
        return self._questions.get(question_id)

    def get_category_weight(self, category: str) -> Optional[CategoryWeightEntry]:
        return self._categories.get(category)

    def question_weights(self) -> List[WeightEntry]:
        return list(self._questions.values())

    def category_weights(self) -> List[CategoryWeightEntry]:
        return list(self._categories.values())

    def categories(self) -> List[str]:
        """Distinct categories referenced by question entries, in insertion order."""
        return list(dict.fromkeys(w.category for w in self._questions.values()))

    def entries_for_category(self, category: str) -> List[WeightEntry]:
        return [w for w in self._questions.values() if w.category == category]

    def entries_for_dimension(self, analysis_type: Union[AnalysisType, str]) -> List[WeightEntry]:
        wanted = AnalysisType(analysis_type)
        return [w for w in self._questions.values() if w.analysis_type is wanted]

    def export_all(self) -> WeightSnapshot:
        return WeightSnapshot(
            question_weights=tuple(self._questions.values()),
            category_weights=tuple(self._categories.values()),
        )

    # ------------------------------------------------------------------
    # Mutations (each one persists the full snapshot)
    # ------------------------------------------------------------------

    def upsert_question_weight(self, entry: WeightEntry) -> None:
        """Insert or replace the weight for ``entry.question_id``.

        An unregistered category is registered on the fly with the question's
        weight so the overall score can resolve it.
        """
        self._questions.pop(entry.question_id, None)
        self._questions[entry.question_id] = entry
        self._register_category(entry)
        logger.info(
            "question_weight_upserted",
            extra={"question_id": entry.question_id, "weight": entry.weight},
        )
        self._persist()

    def upsert_category_weight(self, entry: CategoryWeightEntry) -> None:
        self._categories.pop(entry.category, None)
        self._categories[entry.category] = entry
        logger.info(
            "category_weight_upserted",
            extra={"category": entry.category, "weight": entry.weight},
        )
        self._persist()

    def update_question_weight(self, question_id: str, **changes: Any) -> Optional[WeightEntry]:
        """Merge *changes* into an existing entry; no-op when *question_id* is unknown."""
        current = self._questions.get(question_id)
        if current is None:
            return None
        changes.pop("question_id", None)
        updated = replace(current, **changes)
        self._questions[question_id] = updated
        self._register_category(updated)
        logger.info(
            "question_weight_updated",
            extra={"question_id": question_id, "weight": updated.weight},
        )
        self._persist()
        return updated

    def remove(self, question_id: str) -> Optional[WeightEntry]:
        """Remove the weight of *question_id*. Returns the removed entry or None."""
        removed = self._questions.pop(question_id, None)
        if removed is not None:
            logger.info("question_weight_removed", extra={"question_id": question_id})
        self._persist()
        return removed

    def import_all(self, snapshot: WeightSnapshot) -> None:
        """Replace both tables with *snapshot* in one step."""
        self._replace_all(snapshot)
        self._persist()

    def reset_to_defaults(self) -> None:
        self._replace_all(default_snapshot())
        logger.info("weights_reset_to_defaults")
        self._persist()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_all(self, snapshot: WeightSnapshot) -> None:
        questions = {w.question_id: w for w in snapshot.question_weights}
        categories = {c.category: c for c in snapshot.category_weights}
        self._questions, self._categories = questions, categories

    def _register_category(self, entry: WeightEntry) -> None:
        if entry.category not in self._categories:
            self._categories[entry.category] = CategoryWeightEntry(
                category=entry.category,
                weight=entry.weight,
                description=f"Categoria adicionada dinamicamente: {entry.category}",
            )

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self.export_all())

    def __len__(self) -> int:
        return len(self._questions)

    def __repr__(self) -> str:
        return (
            f"WeightRegistry(questions={len(self._questions)}, "
            f"categories={len(self._categories)})"
        )


def load_registry(store: WeightStore) -> WeightRegistry:
    """Build the registry from *store*, falling back to defaults on load failure."""
    try:
        snapshot = store.load()
    except WeightsLoadError as exc:
        logger.warning("Using default weights: %s", exc)
        snapshot = default_snapshot()
    return WeightRegistry(snapshot, store=store)
