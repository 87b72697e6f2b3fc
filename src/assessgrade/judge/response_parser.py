"""
Response Parser

Extracts a grading verdict from a judge reply. Replies are frequently not
pure JSON: the text may sit in one of several envelope shapes and the JSON
object may be wrapped in prose or code fences.
"""

import json
import math
from typing import Any, Dict, Iterator, Optional, Tuple

from .base import JudgeVerdict
from ..core.exceptions import JudgeResponseError
from ..utils.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()


class JudgeResponseParser:
    """Parses judge replies into normalized JudgeVerdict objects."""

    # Paths tried in order to locate the model output text
    ENVELOPE_PATHS: Tuple[Tuple[Any, ...], ...] = (
        ('candidates', 0, 'content', 'parts', 0, 'text'),
        ('candidates', 0, 'content', 0, 'parts', 0, 'text'),
        ('candidates', 0, 'output'),
        ('output', 0, 'content', 0, 'parts', 0, 'text'),
        ('output', 0, 'text'),
        ('text',),
    )

    TRUE_STRINGS = {'true', 'yes', 'correct', '1'}

    def extract_text(self, envelope: Any) -> str:
        """
        Locate the output text in a response envelope.

        Falls back to the serialized envelope so a verdict embedded anywhere
        in it can still be found.
        """
        if isinstance(envelope, str):
            return envelope

        for path in self.ENVELOPE_PATHS:
            value = self._dig(envelope, path)
            if value is not _MISSING and value is not None:
                return value if isinstance(value, str) else str(value)

        return json.dumps(envelope)

    def parse(self, envelope: Any, model_id: Optional[str] = None) -> JudgeVerdict:
        """
        Parse a response envelope (or raw text) into a verdict.

        Raises:
            JudgeResponseError: If no JSON object can be decoded
        """
        text = self.extract_text(envelope)
        payload = self.decode_object(text)
        if payload is None:
            logger.warning(f"Unable to parse verdict from judge output: {text[:200]!r}")
            raise JudgeResponseError(
                "Unable to parse verdict from judge output",
                model_name=model_id,
                raw_output=text
            )
        return self.coerce(payload, model_id=model_id, raw_output=text)

    def decode_object(self, text: str) -> Optional[Dict[str, Any]]:
        """Decode the whole text, else the first balanced {...} that decodes to an object."""
        if not text:
            return None

        try:
            value = json.loads(text)
            if isinstance(value, dict):
                return value
        except ValueError:
            pass

        for candidate in self._balanced_objects(text):
            try:
                value = json.loads(candidate)
            except ValueError:
                continue
            if isinstance(value, dict):
                return value

        return None

    def coerce(self, payload: Dict[str, Any], model_id: Optional[str] = None,
               raw_output: Optional[str] = None) -> JudgeVerdict:
        """
        Apply field defaults and clamping.

        Missing ``correct`` is false, missing ``feedback`` is empty and a
        missing or non-numeric ``score`` derives from correctness. The older
        ``{"result": "CORRECT", "reason": ...}`` shape is accepted as well.
        """
        raw_correct = payload.get('correct', payload.get('result', False))
        correct = self._to_bool(raw_correct)

        feedback = payload.get('feedback', payload.get('reason'))
        feedback = '' if feedback is None else str(feedback).strip()

        score = self._to_score(payload.get('score'))
        if score is None:
            score = 1.0 if correct else 0.0

        return JudgeVerdict(
            correct=correct,
            feedback=feedback,
            score=max(0.0, min(1.0, score)),
            model_id=model_id,
            metadata={'raw_output': raw_output} if raw_output is not None else {}
        )

    def _to_bool(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in self.TRUE_STRINGS
        return bool(value)

    @staticmethod
    def _to_score(value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            score = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(score):
            return None
        return score

    @staticmethod
    def _dig(obj: Any, path: Tuple[Any, ...]) -> Any:
        for key in path:
            if isinstance(key, int):
                if not isinstance(obj, list) or len(obj) <= key:
                    return _MISSING
            elif not isinstance(obj, dict) or key not in obj:
                return _MISSING
            obj = obj[key]
        return obj

    @staticmethod
    def _balanced_objects(text: str) -> Iterator[str]:
        """Yield every balanced {...} substring, in order of its opening brace."""
        start = text.find('{')
        while start != -1:
            depth = 0
            in_string = False
            escaped = False
            for index in range(start, len(text)):
                char = text[index]
                if in_string:
                    if escaped:
                        escaped = False
                    elif char == '\\':
                        escaped = True
                    elif char == '"':
                        in_string = False
                elif char == '"':
                    in_string = True
                elif char == '{':
                    depth += 1
                elif char == '}':
                    depth -= 1
                    if depth == 0:
                        yield text[start:index + 1]
                        break
            start = text.find('{', start + 1)
