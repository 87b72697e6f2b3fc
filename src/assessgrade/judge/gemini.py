"""
Gemini Judge Client

Semantic judge backed by a Gemini-style ``generateContent`` endpoint, using
an async aiohttp session with request throttling. Calls are made once and
never retried; failures surface as JudgeError subclasses.
"""

import json
import os
import time
from typing import Any, Dict, Optional, Sequence

import aiohttp

from .base import SemanticJudge, JudgeVerdict
from .prompt_formatter import JudgePromptFormatter
from .response_parser import JudgeResponseParser
from ..core.config import JudgeConfig, get_config
from ..core.exceptions import ConfigurationError, JudgeError, JudgeUnavailableError
from ..utils.async_helpers import AsyncThrottler
from ..utils.logging import get_logger

logger = get_logger(__name__)


class GeminiJudge(SemanticJudge):
    """Gemini generateContent client used as the semantic judge."""

    def __init__(self, api_key: Optional[str] = None, config: Optional[JudgeConfig] = None,
                 formatter: Optional[JudgePromptFormatter] = None,
                 parser: Optional[JudgeResponseParser] = None):
        """
        Initialize the Gemini judge.

        Args:
            api_key: API key (read from the configured env var if not provided)
            config: Judge configuration (application config if not provided)
            formatter: Prompt formatter
            parser: Response parser
        """
        self.judge_config = config or get_config().judge
        super().__init__(self.judge_config.model)

        self.api_key = api_key or os.getenv(self.judge_config.api_key_env)
        if not self.api_key:
            raise ConfigurationError(
                f"Judge API key not provided. Set {self.judge_config.api_key_env} environment variable."
            )

        self.base_url = self.judge_config.base_url.rstrip('/')
        self.formatter = formatter or JudgePromptFormatter()
        self.parser = parser or JudgeResponseParser()
        self.throttler = AsyncThrottler(self.judge_config.requests_per_minute)
        self.session: Optional[aiohttp.ClientSession] = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.judge_config.timeout_seconds)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.judge_config.temperature,
                "maxOutputTokens": self.judge_config.max_output_tokens,
            },
        }

    async def evaluate(self, question: Any, answer: str,
                       accepted_answers: Optional[Sequence[str]] = None) -> JudgeVerdict:
        """
        Ask the judge for a verdict on one answer.

        Raises:
            JudgeUnavailableError: On transport failure, non-2xx status or invalid JSON
            JudgeResponseError: If no verdict can be parsed from the output text
        """
        reference = getattr(question, 'answer_key', None)
        prompt = self.formatter.format_prompt(question, answer, reference=reference,
                                              accepted_answers=accepted_answers)
        self._total_requests += 1

        try:
            await self.throttler.acquire()
            start_time = time.time()
            envelope = await self._post(prompt)
            verdict = self.parser.parse(envelope, model_id=self.model_name)
        except JudgeError:
            self._failed_requests += 1
            raise
        except Exception as e:
            self._failed_requests += 1
            raise JudgeUnavailableError(
                f"Unexpected judge failure: {type(e).__name__}: {e}",
                model_name=self.model_name
            ) from e

        verdict.latency_ms = (time.time() - start_time) * 1000
        logger.debug(f"Judge verdict in {verdict.latency_ms:.0f}ms: "
                     f"correct={verdict.correct}, score={verdict.score:.2f}")
        return verdict

    async def _post(self, prompt: str) -> Any:
        """Make a single HTTP request and decode the JSON envelope."""
        session = await self._ensure_session()
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            async with session.post(self.endpoint, headers=headers,
                                    json=self._build_payload(prompt)) as response:
                try:
                    response_text = await response.text()
                except UnicodeDecodeError as e:
                    raise JudgeUnavailableError(
                        f"Undecodable response body: {str(e)}",
                        model_name=self.model_name,
                        status_code=response.status
                    ) from e

                if not 200 <= response.status < 300:
                    raise JudgeUnavailableError(
                        f"Judge request failed with status {response.status}",
                        model_name=self.model_name,
                        status_code=response.status,
                        response_body=response_text
                    )

                try:
                    return json.loads(response_text)
                except json.JSONDecodeError as e:
                    raise JudgeUnavailableError(
                        f"Invalid JSON response: {str(e)}",
                        model_name=self.model_name,
                        status_code=response.status,
                        response_body=response_text
                    ) from e

        except aiohttp.ClientError as e:
            raise JudgeUnavailableError(
                f"HTTP client error: {str(e)}",
                model_name=self.model_name
            ) from e

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
