from __future__ import annotations

import re
from re import Pattern
from typing import Iterable, Sequence, Tuple

import logging

from intake_agent.models.session import EntityType, Turn

logger = logging.getLogger(__name__)


def _rule(label: EntityType, pattern: str) -> Tuple[EntityType, Pattern[str]]:
    return label, re.compile(pattern, re.IGNORECASE | re.MULTILINE)


# Evaluated top to bottom, first match wins. Every brand rule sits above every
# owner rule, so text carrying both kinds of cue classifies as a brand.
CLASSIFIER_RULES: Sequence[Tuple[EntityType, Pattern[str]]] = (
    _rule(EntityType.BRAND, r"^\s*(?:option\s*)?1\s*[.)]?\s*$"),
    _rule(EntityType.BRAND, r"\bbrands?\b"),
    _rule(EntityType.BRAND, r"\bneed (?:a |some )?(?:retail |commercial |office )?space\b"),
    _rule(EntityType.BRAND, r"\blooking for\b"),
    _rule(EntityType.BRAND, r"\btenants?\b"),
    _rule(EntityType.BRAND, r"\boccupiers?\b"),
    _rule(EntityType.BRAND, r"\bour (?:store|outlet|restaurant|caf[eé]|franchise|chain)\b"),
    _rule(EntityType.BRAND, r"\b(?:want|planning) to open\b"),
    _rule(EntityType.OWNER, r"^\s*(?:option\s*)?2\s*[.)]?\s*$"),
    _rule(EntityType.OWNER, r"\bproperty owners?\b"),
    _rule(EntityType.OWNER, r"\blandlord\b"),
    _rule(EntityType.OWNER, r"\blessor\b"),
    _rule(EntityType.OWNER, r"\blist(?:ing)?\b"),
    _rule(EntityType.OWNER, r"\b(?:i|we) (?:have|own) (?:a |an |some )?(?:commercial |retail )?(?:property|space|building|shop)\b"),
    _rule(EntityType.OWNER, r"\bour (?:property|building)\b"),
    _rule(EntityType.OWNER, r"\bspace available\b"),
    _rule(EntityType.OWNER, r"\bfor (?:rent|lease)\b"),
    _rule(EntityType.OWNER, r"\brent (?:it )?out\b"),
)


def history_text(history: Iterable[Turn]) -> str:
    """Lowercase concatenation of what the user has said so far."""
    return "\n".join(turn.content.lower() for turn in history if turn.role == "user")


def _match(text: str) -> EntityType:
    for label, pattern in CLASSIFIER_RULES:
        if pattern.search(text):
            logger.debug("classifier.rule_hit label=%s pattern=%s", label.value, pattern.pattern)
            return label
    return EntityType.UNDETERMINED


def classify_entity(utterance: str, history: str = "") -> EntityType:
    for text in (history.lower(), utterance.lower().strip()):
        if not text:
            continue
        label = _match(text)
        if label != EntityType.UNDETERMINED:
            return label
    return EntityType.UNDETERMINED
