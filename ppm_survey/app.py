"""Application wiring: settings, logging, weight registry and interview store.

Importing this module has no side effects; callers run :func:`bootstrap`
(or the individual builders) once per process.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ppm_survey.config import Settings
from ppm_survey.interview_store import (
    HttpInterviewStore,
    InMemoryInterviewStore,
    InterviewStore,
)
from ppm_survey.scoring.registry import JsonFileWeightStore, WeightRegistry, load_registry

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=settings.log_level)


def build_registry(settings: Settings) -> WeightRegistry:
    """Load the weight registry persisted at ``settings.weights_path``.

    A missing or corrupt file yields the default weights (logged, not raised).
    """
    return load_registry(JsonFileWeightStore(settings.weights_path))


def build_interview_store(settings: Settings) -> InterviewStore:
    if not settings.api_url:
        logger.info("PPM_API_URL is empty; using the in-memory interview store.")
        return InMemoryInterviewStore()
    logger.info("Using interview API at %s", settings.api_url)
    return HttpInterviewStore(settings.api_url, timeout=settings.http_timeout)


@dataclass
class Application:
    settings: Settings
    registry: WeightRegistry
    store: InterviewStore

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()


def bootstrap(settings: Optional[Settings] = None) -> Application:
    """Load ``.env``, configure logging and build the collaborators."""
    load_dotenv()
    settings = settings or Settings.from_env()
    configure_logging(settings)

    registry = build_registry(settings)
    store = build_interview_store(settings)
    logger.info("PPM survey engine ready: %r", registry)
    return Application(settings=settings, registry=registry, store=store)
