"""
Tests for Judge Prompt Formatter
"""

import json

from assessgrade.evaluation.types import Question, QuestionType
from assessgrade.judge.prompt_formatter import JudgePromptFormatter, PromptConfig


class TestJudgePromptFormatter:
    """Test cases for JudgePromptFormatter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.formatter = JudgePromptFormatter()
        self.question = Question(
            id="q1", type=QuestionType.MCQ, topic="Networking",
            prompt="Which protocol is full-duplex?", options=("A. HTTP", "B. WebSocket")
        )

    def test_includes_question_record(self):
        prompt = self.formatter.format_prompt(self.question, "B")

        start = prompt.index("Question:\n") + len("Question:\n")
        end = prompt.index("\nCandidate answer:")
        record = json.loads(prompt[start:end])
        assert record == {
            "id": "q1",
            "type": "mcq",
            "topic": "Networking",
            "question": "Which protocol is full-duplex?",
            "options": ["A. HTTP", "B. WebSocket"],
        }

    def test_ends_with_answer_and_json_request(self):
        prompt = self.formatter.format_prompt(self.question, "B")
        assert prompt.endswith("Candidate answer:\nB\nReturn JSON now.")
        assert prompt.startswith(JudgePromptFormatter.GRADING_INSTRUCTIONS[0])

    def test_reference_and_keywords(self):
        prompt = self.formatter.format_prompt("What is a CDN?", "edge cache",
                                              reference="A content delivery network",
                                              accepted_answers=["cache", "edge"])
        assert "Question:\nWhat is a CDN?" in prompt
        assert "Reference answer: A content delivery network" in prompt
        assert "Expected keywords: cache, edge" in prompt

    def test_keywords_can_be_disabled(self):
        formatter = JudgePromptFormatter(PromptConfig(include_keywords=False))
        prompt = formatter.format_prompt("Q?", "a", accepted_answers=["cache"])
        assert "Expected keywords" not in prompt

    def test_custom_system_prompt_and_plain_question(self):
        formatter = JudgePromptFormatter(PromptConfig(system_prompt="Grade strictly.",
                                                      include_question_record=False))
        prompt = formatter.format_prompt(self.question, "")

        assert prompt.startswith("Grade strictly.\nQuestion:\nWhich protocol is full-duplex?")
        assert JudgePromptFormatter.GRADING_INSTRUCTIONS[0] not in prompt
