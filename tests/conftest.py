"""
Pytest Configuration

Global test configuration, fixtures, and utilities for the
assessgrade test suite.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock, Mock

# Add src to Python path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from assessgrade.core.config import AppConfig, JudgeConfig, LoggingConfig, set_config
from assessgrade.evaluation.types import Question, QuestionType
from assessgrade.judge.base import JudgeVerdict, SemanticJudge


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_config(temp_dir):
    """Provide test configuration."""
    return AppConfig(
        name="assessgrade-test",
        version="test",
        debug=True,
        judge=JudgeConfig(timeout_seconds=2.0, requests_per_minute=0, max_concurrent=2),
        logging=LoggingConfig(
            level="DEBUG",
            file=str(temp_dir / "test.log")
        ),
    )


@pytest.fixture(autouse=True)
def global_config(test_config):
    """Install the test configuration as the global one."""
    set_config(test_config)
    yield test_config
    set_config(None)


@pytest.fixture
def sample_questions_data() -> List[Dict[str, Any]]:
    """Raw question payloads as produced by the question generator."""
    return [
        {
            "id": "q1",
            "type": "mcq",
            "topic": "Networking",
            "question": "Which protocol keeps a full-duplex connection open?",
            "options": ["A. HTTP/1.0", "B. WebSocket", "C. FTP", "D. SMTP"],
            "answerKey": "B",
        },
        {
            "id": "q2",
            "type": "oneLiner",
            "topic": "Networking",
            "question": "What does a CDN do?",
            "keywords": [["cache", "caches", "caching"], ["edge", "edge servers"]],
        },
        {
            "id": "q3",
            "type": "fillBlank",
            "topic": "Frontend",
            "sentence": "Realtime updates use ___ and styling uses ___.",
            "acceptable": [["websockets", "websocket"], ["tailwind css"]],
        },
        {
            "id": "q4",
            "type": "oneLiner",
            "topic": "Frontend",
            "question": "When was the project released?",
            "answerKey": "23 July 2025",
        },
    ]


@pytest.fixture
def sample_questions(sample_questions_data) -> List[Question]:
    """Validated Question records."""
    from assessgrade.utils.validation import validate_question_data
    return [validate_question_data(data) for data in sample_questions_data]


@pytest.fixture
def one_liner_question() -> Question:
    return Question(
        id="ol-1",
        type=QuestionType.ONE_LINER,
        topic="Networking",
        prompt="What does a CDN do?",
        keywords=[["cache", "caching"], ["edge"]],
    )


@pytest.fixture
def fill_blank_question() -> Question:
    return Question(
        id="fb-1",
        type=QuestionType.FILL_BLANK,
        topic="Frontend",
        prompt="Realtime updates use ___ and styling uses ___.",
        acceptable=[["websockets"], ["tailwind css"]],
    )


@pytest.fixture
def mock_judge():
    """Semantic judge double returning a correct verdict."""
    judge = Mock(spec=SemanticJudge)
    judge.model_name = "mock-judge"
    judge.evaluate = AsyncMock(return_value=JudgeVerdict(
        correct=True, feedback="Looks right.", score=0.9, model_id="mock-judge"
    ))
    judge.close = AsyncMock()
    return judge
