from typing import Any, List

MEANING = "meaning"
READING = "reading"
PROMPT_KINDS = (MEANING, READING)

MEANING_DELIMITER = "/"


def _normalize(text: Any) -> str:
    return str(text or "").strip().lower()


def meaning_alternatives(meaning: Any) -> List[str]:
    """Split a stored meaning like "day/sun" into normalized candidates."""
    candidates = [_normalize(part) for part in str(meaning or "").split(MEANING_DELIMITER)]
    return [c for c in candidates if c]


def is_correct(prompt_kind: str, submission: str, item: Any) -> bool:
    """
    Decide whether a submitted answer is acceptable for a kanji.

    Meaning prompts accept any of the "/"-separated alternatives. Reading
    prompts accept either the on-reading or the kun-reading exactly.
    Comparison ignores case and surrounding whitespace.
    """
    answer = _normalize(submission)
    if not answer:
        return False

    if prompt_kind == MEANING:
        return answer in meaning_alternatives(getattr(item, "meaning", None))
    if prompt_kind == READING:
        readings = (
            _normalize(getattr(item, "on_reading", None)),
            _normalize(getattr(item, "kun_reading", None)),
        )
        return answer in readings
    return False


def expected_answer(prompt_kind: str, item: Any) -> str:
    """The answer shown to the learner after a miss."""
    if prompt_kind == MEANING:
        return str(item.meaning or "")
    return str(item.on_reading or item.kun_reading or "")
