from __future__ import annotations

import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

import logging
from word2number import w2n

from intake_agent.models.session import EntityType, MONEY_SLOTS, Slot, Turn, money_slot
from intake_agent.services import gazetteer
from intake_agent.services.magnitude import apply_unit, disambiguate

logger = logging.getLogger(__name__)

SQFT_PER_SQM = 10.764
MAX_BARE_SIZE = 100_000
# Longer digit runs are never an amount or an area and make regex scans slow.
MAX_NUMBER_DIGITS = 12
MAX_NUMBER_WORDS = 12

_NUMBER_WORDS = {
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
    "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen",
    "nineteen", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety",
    "hundred", "thousand", "million", "and",
}

# Words that never make a location on their own.
_GENERIC_WORDS = {
    "a", "an", "the", "my", "our", "i", "im", "i'm", "am", "we", "it", "this", "that", "here", "there",
    "brand", "brands", "need", "space", "looking", "for", "budget", "rent", "monthly", "deposit",
    "size", "sqft", "lakh", "lakhs", "thousand", "k", "property", "area", "city", "location",
    "option", "good", "prime", "retail", "commercial", "office", "shop", "store", "outlet", "cafe",
    "café", "restaurant", "qsr", "kiosk", "showroom", "business", "main", "road", "tenant", "tenants",
    "owner", "landlord", "yes", "no", "ok", "okay", "sure", "hi", "hello", "thanks",
    "something", "anything", "affordable", "cheap", "nice", "great", "decent", "new", "condition",
    "interested", "available", "ready",
}

_LEADING_ARTICLES = re.compile(r"^(?:a|an|the|my|our)\s+", re.IGNORECASE)
_LOCATION_CUT = re.compile(
    r"\b(?:and|with|for|of|in|on|at|near|budget|rent|size|around|about|under|within|is|as|my|i|we|"
    r"sqft|per|monthly|month|please|thanks|opening|starting|running|launching|expanding|searching|setting)\b|[.;:!?\d(]",
    re.IGNORECASE,
)
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d)")
_BARE_INTEGER = re.compile(rf"^\s*(?:₹|rs\.?|inr)?\s*(\d{{1,{MAX_NUMBER_DIGITS}}})\s*$", re.IGNORECASE)

_SIZE_UNIT = r"(?:sq\.?\s*ft\.?|sqft|sft|sq\.?\s*feet|square\s*f(?:ee|oo)t)"
_SQM_UNIT = r"(?:sq\.?\s*m(?:eters?|etres?)?|sqm|square\s*met(?:er|re)s?|m2|m²)"
_CURRENCY = r"(?:₹|rs\.?|inr)"
_DIGITS = rf"(?<!\d)(?<!\d\.)\d{{1,{MAX_NUMBER_DIGITS}}}(?:\.\d{{1,4}})?(?!\d)"
_NUMBER = rf"({_DIGITS})"
_MONEY_UNIT = r"(?:lakhs?|lacs?|crores?|cr|thousand|k)"


@dataclass(frozen=True)
class QuestionContext:
    pending_slot: Optional[Slot] = None
    bare_number: Optional[int] = None

    @property
    def asks_money(self) -> bool:
        return self.pending_slot in MONEY_SLOTS

    @property
    def asks_size(self) -> bool:
        return self.pending_slot == Slot.SIZE

    @property
    def asks_location(self) -> bool:
        return self.pending_slot == Slot.LOCATION


@dataclass(frozen=True)
class ExtractionRule:
    slot: str
    name: str
    applies: Callable[[QuestionContext], bool]
    pattern: Optional[Pattern[str]]
    transform: Callable[[Optional[Match[str]], str, QuestionContext], Optional[Any]]


def _always(_: QuestionContext) -> bool:
    return True


def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def normalize_utterance(utterance: str) -> str:
    return _THOUSANDS_SEPARATOR.sub("", utterance or "").strip()


def numeric_reply(utterance: str) -> Optional[int]:
    """The integer a reply consists of, written in digits or words, else None."""
    text = normalize_utterance(utterance)
    match = _BARE_INTEGER.match(text)
    if match:
        return int(match.group(1))
    tokens = re.findall(r"[a-z]+", text.lower().replace("-", " "))
    if not tokens or len(tokens) > MAX_NUMBER_WORDS or len(tokens) != len(text.replace("-", " ").split()):
        return None
    if not all(token in _NUMBER_WORDS for token in tokens) or tokens == ["and"]:
        return None
    try:
        return int(w2n.word_to_num(" ".join(tokens)))
    except (ValueError, IndexError):
        return None


def clean_location(candidate: Optional[str]) -> Optional[str]:
    if not candidate:
        return None
    text = _LOCATION_CUT.split(candidate, maxsplit=1)[0]
    text = text.strip(" ,'-&")
    text = _LEADING_ARTICLES.sub("", text).strip(" ,'-&")
    if not text or any(ch.isdigit() for ch in text):
        return None
    words = text.lower().split()
    if len(words) > 5 or all(word in _GENERIC_WORDS for word in words):
        return None
    official = gazetteer.canonical_name(text)
    if official:
        return official
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def _prepositional_location(_: Optional[Match[str]], text: str, __: QuestionContext) -> Optional[str]:
    for match in _PREPOSITIONAL.finditer(text):
        location = clean_location(match.group(1))
        if location:
            return location
    return None


def _gazetteer_location(_: Optional[Match[str]], text: str, __: QuestionContext) -> Optional[str]:
    location = gazetteer.find_location(text)
    return location.official if location else None


def _whole_reply_location(_: Optional[Match[str]], text: str, __: QuestionContext) -> Optional[str]:
    return clean_location(text)


def _size_first_number(match: Optional[Match[str]], _: str, __: QuestionContext) -> Optional[int]:
    return int(float(match.group(1))) if match else None


def _size_sqm(match: Optional[Match[str]], _: str, __: QuestionContext) -> Optional[int]:
    return int(round(float(match.group(1)) * SQFT_PER_SQM)) if match else None


def _size_bare(_: Optional[Match[str]], __: str, ctx: QuestionContext) -> Optional[int]:
    if ctx.bare_number is not None and 0 < ctx.bare_number < MAX_BARE_SIZE:
        return ctx.bare_number
    return None


def _size_labelled(match: Optional[Match[str]], _: str, __: QuestionContext) -> Optional[int]:
    if not match:
        return None
    size = int(float(match.group(1)))
    return size if 0 < size < MAX_BARE_SIZE else None


def _money_with_unit(match: Optional[Match[str]], _: str, __: QuestionContext) -> Optional[int]:
    if not match:
        return None
    amount = apply_unit(float(match.group(1)), match.group(2))
    return amount or None


def _money_range(match: Optional[Match[str]], _: str, ctx: QuestionContext) -> Optional[int]:
    """Lower end of a budget range, with the unit taken from either end."""
    if not match:
        return None
    unit = match.group("low_unit") or match.group("high_unit")
    low = float(match.group("low"))
    if unit:
        return apply_unit(low, unit) or None
    if match.group("currency") or ctx.asks_money:
        return disambiguate(int(low)) or None
    return None


def _money_leading_integer(match: Optional[Match[str]], _: str, __: QuestionContext) -> Optional[int]:
    if not match:
        return None
    return disambiguate(int(match.group(1))) or None


def _money_number_words(_: Optional[Match[str]], __: str, ctx: QuestionContext) -> Optional[int]:
    if ctx.bare_number is None:
        return None
    return disambiguate(ctx.bare_number) or None


_PREPOSITIONAL = _compile(
    r"\b(?:need space in|space in|looking for|location|in|on|at|near)(?:\s+is)?[\s:]+(?=([a-z][a-z\s,.'&-]*))"
)

LOCATION_RULES: Sequence[ExtractionRule] = (
    ExtractionRule(
        "location", "prepositional",
        lambda ctx: not (ctx.asks_money or ctx.asks_size),
        None, _prepositional_location,
    ),
    ExtractionRule("location", "gazetteer", _always, None, _gazetteer_location),
    ExtractionRule("location", "whole_reply", lambda ctx: ctx.asks_location, None, _whole_reply_location),
)

SIZE_RULES: Sequence[ExtractionRule] = (
    ExtractionRule("size", "sqft_range", _always, _compile(rf"{_NUMBER}\s*(?:-|to)\s*{_DIGITS}\s*{_SIZE_UNIT}"), _size_first_number),
    ExtractionRule("size", "sqft", _always, _compile(rf"{_NUMBER}\s*{_SIZE_UNIT}(?!\w)"), _size_first_number),
    ExtractionRule("size", "sqm", _always, _compile(rf"{_NUMBER}\s*{_SQM_UNIT}(?!\w)"), _size_sqm),
    ExtractionRule(
        "size", "labelled", _always,
        _compile(rf"\b(?:size|area)\s*(?::|is|of|to|around|about)?\s*{_NUMBER}(?!\s*(?:{_SQM_UNIT}|{_MONEY_UNIT}\b))"),
        _size_labelled,
    ),
    ExtractionRule("size", "bare_number", lambda ctx: ctx.asks_size, None, _size_bare),
)

_MONEY_RANGE = _compile(
    rf"(?P<currency>(?<![a-z]){_CURRENCY})?\s*(?P<low>{_DIGITS})\s*(?P<low_unit>{_MONEY_UNIT})?"
    rf"\s*(?:-|–|to)\s*{_CURRENCY}?\s*(?P<high>{_DIGITS})\s*(?P<high_unit>{_MONEY_UNIT})?\b(?!\s*{_SIZE_UNIT})"
)

MONEY_RULES: Sequence[ExtractionRule] = (
    ExtractionRule("money", "money_range", _always, _MONEY_RANGE, _money_range),
    ExtractionRule("money", "lakh", _always, _compile(rf"{_NUMBER}\s*(lakhs?|lacs?)\b"), _money_with_unit),
    ExtractionRule("money", "crore", _always, _compile(rf"{_NUMBER}\s*(crores?|cr)\b"), _money_with_unit),
    ExtractionRule("money", "currency_thousand", _always, _compile(rf"{_CURRENCY}\s*{_NUMBER}\s*(thousand|k)\b"), _money_with_unit),
    ExtractionRule(
        "money", "labelled",
        lambda ctx: not ctx.asks_money,
        _compile(rf"\b(?:rent|budget)\s*(?::|is|of|around|about)?\s*{_CURRENCY}?\s*{_NUMBER}\s*({_MONEY_UNIT})?\b"),
        _money_with_unit,
    ),
    ExtractionRule("money", "asked_leading_integer", lambda ctx: ctx.asks_money, _compile(rf"(?<!\d)(\d{{1,{MAX_NUMBER_DIGITS}}})(?!\d)"), _money_leading_integer),
    ExtractionRule("money", "asked_number_words", lambda ctx: ctx.asks_money, None, _money_number_words),
)

EXTRACTION_RULES: Sequence[ExtractionRule] = (*LOCATION_RULES, *SIZE_RULES, *MONEY_RULES)


def apply_rules(rules: Iterable[ExtractionRule], text: str, ctx: QuestionContext) -> Dict[str, Any]:
    """First matching rule per slot wins."""
    found: Dict[str, Any] = {}
    for rule in rules:
        if rule.slot in found or not rule.applies(ctx):
            continue
        match = None
        if rule.pattern is not None:
            match = rule.pattern.search(text)
            if not match:
                continue
        value = rule.transform(match, text, ctx)
        if value is None:
            continue
        found[rule.slot] = value
        logger.debug("extractor.match slot=%s rule=%s value=%s", rule.slot, rule.name, value)
    return found


def infer_pending_slot(history: Sequence[Turn], entity_type: EntityType) -> Optional[Slot]:
    """Guess what the last assistant turn asked for when no pending slot was carried."""
    last_question = next((turn.content.lower() for turn in reversed(history) if turn.role == "assistant"), "")
    if not last_question:
        return None
    if any(word in last_question for word in ("rent", "budget", "monthly")):
        return money_slot(entity_type)
    if any(word in last_question for word in ("where", "location", "city")):
        return Slot.LOCATION
    if any(word in last_question for word in ("size", "sqft", "area")):
        return Slot.SIZE
    return None


_REFERENCE_WORDS = _compile(r"\b(?:it|that)\b")
_SAME_LOCATION = _compile(r"\bsame (?:location|area|place)\b")
_SAME_SIZE = _compile(r"\bsame size\b")


def resolve_references(utterance: str, pending_slot: Optional[Slot], details: Dict[str, Any]) -> str:
    """Rewrite "same location" and "same size" as the stored values, and "it" or
    "that" as the slot the last question was about ("make it 1200" while size
    is pending reads as "make size 1200").
    """
    text = utterance
    location = details.get(Slot.LOCATION.value)
    if location:
        text = _SAME_LOCATION.sub(lambda _: str(location), text)
    size = details.get(Slot.SIZE.value)
    if size:
        text = _SAME_SIZE.sub(lambda _: f"{size} sqft", text)
    if pending_slot is not None:
        text = _REFERENCE_WORDS.sub(pending_slot.value, text)
    return text


def extract_details(utterance: str, entity_type: EntityType, pending_slot: Optional[Slot] = None) -> Dict[str, Any]:
    text = normalize_utterance(utterance)
    if not text or entity_type == EntityType.UNDETERMINED:
        return {}
    ctx = QuestionContext(pending_slot=pending_slot, bare_number=numeric_reply(text))
    found = apply_rules(EXTRACTION_RULES, text, ctx)
    details: Dict[str, Any] = {}
    if "location" in found:
        details[Slot.LOCATION.value] = found["location"]
    if "size" in found:
        details[Slot.SIZE.value] = found["size"]
    if "money" in found:
        details[money_slot(entity_type).value] = found["money"]
    return details

