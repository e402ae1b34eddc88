"""Sequential multi-stage analysis pipeline that streams progress events."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Protocol

from . import prompts
from .config import ExtractionPolicy
from .errors import ExtractionError, StorageError, TransportError, UpstreamError
from .extraction import is_parse_failure, parse_stage_output
from .schemas import AnalysisRecord, Stage
from .store import ResultStore

logger = logging.getLogger(__name__)

PIPELINE_ERRORS = (UpstreamError, TransportError, ExtractionError)


class Completer(Protocol):
    def complete(self, instruction: str) -> str:
        ...


@dataclass(frozen=True)
class Notification:
    """One typed message pushed over the analysis stream."""

    event: str
    data: Dict[str, Any]


@dataclass
class PipelineState:
    """Intermediate results carried from one stage to the next."""

    idea: str
    skill_level: str
    results: Dict[Stage, Dict[str, Any]] = field(default_factory=dict)
    competitor_names: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(stage in self.results for stage in Stage)


PromptBuilder = Callable[[PipelineState], str]

STAGE_PROMPTS: Dict[Stage, PromptBuilder] = {
    Stage.MARKET: lambda state: prompts.market_prompt(state.idea),
    Stage.TECHNICAL: lambda state: prompts.technical_prompt(state.idea, state.skill_level),
    Stage.OPPORTUNITY: lambda state: prompts.opportunity_prompt(state.idea),
    Stage.DEPLOYMENT: lambda state: prompts.deployment_prompt(state.idea),
    Stage.SENTIMENT: lambda state: prompts.sentiment_prompt(state.idea, state.competitor_names),
}


def new_result_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnalysisPipeline:
    """Run the five stages in order for one idea and yield notifications.

    The sequence is always ``status``/result pairs for market, technical,
    opportunity, deployment and sentiment, followed by exactly one terminal
    ``complete`` or ``error`` notification. A record is stored only after
    every stage has produced a result.
    """

    def __init__(
        self,
        client: Completer,
        store: ResultStore,
        policy: ExtractionPolicy = ExtractionPolicy.SOFT,
        *,
        id_factory: Callable[[], str] = new_result_id,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self._client = client
        self._store = store
        self._policy = policy
        self._id_factory = id_factory
        self._clock = clock

    def run(self, idea: str, skill_level: str) -> Iterator[Notification]:
        state = PipelineState(idea=idea, skill_level=skill_level)
        logger.info("Analysis started for idea %r", idea[:60])

        for stage in Stage:
            yield Notification("status", {"phase": stage.value, "message": stage.status_message})
            try:
                result = self._run_stage(stage, state)
            except PIPELINE_ERRORS as exc:
                logger.error("Stage %s failed: %s", stage.value, exc)
                yield Notification("error", {"message": str(exc)})
                return
            except Exception as exc:
                logger.exception("Stage %s crashed", stage.value)
                yield Notification("error", {"message": str(exc) or type(exc).__name__})
                return
            yield Notification(stage.value, result)

        record = self._assemble(state)
        self._persist(record)
        logger.info("Analysis %s complete", record.id)
        yield Notification("complete", {"resultId": record.id})

    def _run_stage(self, stage: Stage, state: PipelineState) -> Dict[str, Any]:
        instruction = STAGE_PROMPTS[stage](state)
        raw = self._client.complete(instruction)
        result = parse_stage_output(raw, self._policy)
        if is_parse_failure(result):
            logger.warning("Stage %s returned unparseable output", stage.value)

        state.results[stage] = result
        if stage is Stage.MARKET:
            state.competitor_names = prompts.competitor_names(result)
            logger.debug("Carrying competitors forward: %s", state.competitor_names)
        return result

    def _assemble(self, state: PipelineState) -> AnalysisRecord:
        if not state.complete:
            raise RuntimeError("Cannot assemble a record from a partial pipeline")
        return AnalysisRecord(
            id=self._id_factory(),
            idea=state.idea,
            skill_level=state.skill_level,
            market=state.results[Stage.MARKET],
            technical=state.results[Stage.TECHNICAL],
            opportunity=state.results[Stage.OPPORTUNITY],
            deployment=state.results[Stage.DEPLOYMENT],
            sentiment=state.results[Stage.SENTIMENT],
            created_at=self._clock(),
        )

    def _persist(self, record: AnalysisRecord) -> None:
        # Persistence is best-effort: the caller still gets the identifier.
        try:
            self._store.put(record)
        except StorageError:
            logger.exception("Failed to persist analysis %s", record.id)
