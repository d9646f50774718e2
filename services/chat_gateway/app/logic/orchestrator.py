from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..config import HTTP_TIMEOUT_SECONDS
from ..errors import InvalidInputError
from ..logger import logger
from .classifier import Decision, OutcomeClassifier


class RunState(str, Enum):
    PENDING = "pending"
    TRYING = "trying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class OrchestrationResult:
    state: RunState
    attempted: List[str] = field(default_factory=list)
    content: Optional[str] = None
    model_used: Optional[str] = None
    last_error: Optional[str] = None
    # (state, candidate) pairs in the order the run went through them
    transitions: List[Tuple[RunState, Optional[str]]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED


def _unique(models) -> List[str]:
    seen, ordered = set(), []
    for m in models:
        if m not in seen:
            seen.add(m)
            ordered.append(m)
    return ordered


class FallbackOrchestrator:
    """Try candidates one after another until one returns a completion.

    PENDING -> TRYING(i) -> SUCCEEDED | TRYING(i+1) | EXHAUSTED

    Attempts are strictly sequential: candidate i+1 is only called once the
    outcome of candidate i has been classified.
    """

    def __init__(self, catalog, client, classifier: Optional[OutcomeClassifier] = None,
                 timeout: float = HTTP_TIMEOUT_SECONDS):
        self.catalog = catalog
        self.client = client
        self.classifier = classifier or OutcomeClassifier()
        self.timeout = timeout

    async def run(self, prompt: Optional[str]) -> OrchestrationResult:
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidInputError()

        result = OrchestrationResult(state=RunState.PENDING)
        result.transitions.append((RunState.PENDING, None))

        catalog = await self.catalog.get_candidates()
        candidates = _unique(catalog.models)
        logger.debug("Candidates ({}): {}", catalog.source, candidates)

        for i, model in enumerate(candidates):
            result.state = RunState.TRYING
            result.transitions.append((RunState.TRYING, model))
            logger.info("Trying model: {}", model)

            outcome = await self.client.complete(prompt, model, self.timeout)
            result.attempted.append(model)
            verdict = self.classifier.classify(outcome, has_next=i + 1 < len(candidates))

            if verdict.decision is Decision.STOP_SUCCESS:
                result.state = RunState.SUCCEEDED
                result.content = outcome.content
                result.model_used = model
                result.transitions.append((RunState.SUCCEEDED, model))
                logger.info("Model {} succeeded after {} attempt(s)", model, len(result.attempted))
                return result

            result.last_error = outcome.reason
            logger.warning("Model {} failed ({}, {}): {}", model, outcome.kind.value, verdict.category.value, outcome.reason)
            if verdict.decision is Decision.STOP_EXHAUSTED:
                break

        result.state = RunState.EXHAUSTED
        result.transitions.append((RunState.EXHAUSTED, None))
        logger.error("All models failed. Attempted: {}; last error: {}", result.attempted, result.last_error)
        return result
