from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import logging

from intake_agent.config import Settings, get_settings
from intake_agent.logging.flight_recorder import FlightRecorder
from intake_agent.models.session import (
    EntityType,
    MONEY_SLOTS,
    SessionContext,
    Slot,
    Turn,
    TurnResult,
    money_slot,
)
from intake_agent.services.classifier import classify_entity, history_text
from intake_agent.services.completion import completion_summary, is_complete, missing_slots
from intake_agent.services.extractor import (
    extract_details,
    infer_pending_slot,
    numeric_reply,
    resolve_references,
)
from intake_agent.services.fallback_responder import (
    CLARIFICATION_MESSAGE,
    ambiguous_number_reply,
    fallback_reply,
)
from intake_agent.services.magnitude import disambiguate
from intake_agent.services.state_merger import is_empty, merge_details
from intake_agent.services.text_generator import (
    TextGenerator,
    build_system_prompt,
    build_user_prompt,
)

logger = logging.getLogger(__name__)


class IntakeOrchestrator:
    """Runs one conversational turn: classify, extract, merge, then reply.

    The generator is optional. Without one every reply comes from the
    deterministic fallback responder.
    """

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        recorder: Optional[FlightRecorder] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.generator = generator
        self.recorder = recorder
        self.settings = settings or get_settings()

    async def evaluate_turn(
        self,
        utterance: str,
        history: Sequence[Turn],
        previous_context: Optional[SessionContext] = None,
    ) -> TurnResult:
        recorder = self.recorder or FlightRecorder()
        utterance = (utterance or "").strip()
        history = list(history or [])
        previous = previous_context or SessionContext()
        updated_history = [*history, Turn(role="user", content=utterance)]

        with recorder.stage("CLASSIFY"):
            entity_type = previous.entity_type
            if entity_type == EntityType.UNDETERMINED:
                entity_type = classify_entity(utterance, history_text(history))
            logger.info("orchestrator.entity_type %s", entity_type.value)

        if entity_type == EntityType.UNDETERMINED:
            return TurnResult(
                message=CLARIFICATION_MESSAGE,
                entity_type=entity_type,
                collected_details={},
                ready_to_handoff=False,
                context=SessionContext(
                    entity_type=entity_type,
                    collected_details={},
                    conversation_history=updated_history,
                ),
            )

        pending_slot = self._pending_slot(previous, history, entity_type)

        with recorder.stage("EXTRACT", pending_slot=pending_slot.value if pending_slot else None):
            try:
                resolved = resolve_references(utterance, pending_slot, previous.collected_details)
                if resolved != utterance:
                    recorder.log("EXTRACT", "references_resolved", resolved=resolved)
                extracted = extract_details(resolved, entity_type, pending_slot)
            except Exception as exc:  # noqa: BLE001
                logger.warning("orchestrator.extraction_error %s", exc)
                extracted = {}

        with recorder.stage("MERGE", fields=sorted(extracted)):
            details = merge_details(previous.collected_details, extracted)

        with recorder.stage("COMPLETE"):
            summary = completion_summary(entity_type, details)
        if summary:
            return self._result(summary, entity_type, details, updated_history, asks=None)

        with recorder.stage("RESPOND"):
            if pending_slot is not None and not is_empty(extracted.get(pending_slot.value)):
                reply = fallback_reply(entity_type, details, pending_slot, utterance)
                return self._result(reply.message, entity_type, details, updated_history, reply.asks)

            money_key = money_slot(entity_type).value
            bare_number = numeric_reply(utterance)
            forced = disambiguate(bare_number) if bare_number is not None else 0
            if pending_slot in MONEY_SLOTS and forced > 0 and is_empty(details.get(money_key)):
                logger.info("orchestrator.forced_money_assignment value=%s", forced)
                details = merge_details(details, {money_key: forced})
                summary = completion_summary(entity_type, details)
                if summary:
                    return self._result(summary, entity_type, details, updated_history, asks=None)
                reply = fallback_reply(entity_type, details, pending_slot, utterance)
                return self._result(reply.message, entity_type, details, updated_history, reply.asks)

            known_entity = previous.entity_type != EntityType.UNDETERMINED
            if known_entity and pending_slot is None and not extracted and forced > 0:
                recorder.log("RESPOND", "ambiguous_number", number=bare_number)
                reply = ambiguous_number_reply(entity_type, bare_number)
                return self._result(reply.message, entity_type, details, updated_history, reply.asks)

        message = await self._generate(recorder, utterance, history, entity_type, details)
        if message is None:
            reply = fallback_reply(entity_type, details, pending_slot, utterance)
            return self._result(reply.message, entity_type, details, updated_history, reply.asks)

        missing = missing_slots(entity_type, details)
        return self._result(message, entity_type, details, updated_history, missing[0] if missing else None)

    def _pending_slot(
        self,
        previous: SessionContext,
        history: List[Turn],
        entity_type: EntityType,
    ) -> Optional[Slot]:
        slot = previous.pending_slot
        if slot is None:
            return infer_pending_slot(history, entity_type)
        # A slot asked before the entity was known may name the wrong money field.
        if slot in MONEY_SLOTS:
            return money_slot(entity_type)
        return slot

    async def _generate(
        self,
        recorder: FlightRecorder,
        utterance: str,
        history: List[Turn],
        entity_type: EntityType,
        details: Dict[str, Any],
    ) -> Optional[str]:
        if self.generator is None:
            return None
        system_prompt = build_system_prompt(entity_type, details)
        user_prompt = build_user_prompt(utterance, history, self.settings.history_window)
        with recorder.stage("LLM"):
            try:
                message = await self.generator.generate(system_prompt, user_prompt)
            except Exception as exc:  # noqa: BLE001
                logger.warning("orchestrator.generative_fallback %s", exc)
                return None
        message = (message or "").strip()
        return message or None

    @staticmethod
    def _result(
        message: str,
        entity_type: EntityType,
        details: Dict[str, Any],
        history: List[Turn],
        asks: Optional[Slot],
    ) -> TurnResult:
        return TurnResult(
            message=message,
            entity_type=entity_type,
            collected_details=details,
            ready_to_handoff=is_complete(entity_type, details),
            context=SessionContext(
                entity_type=entity_type,
                collected_details=details,
                conversation_history=history,
                pending_slot=asks,
            ),
        )
