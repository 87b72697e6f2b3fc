"""
Prompt Formatter

Builds grading prompts for the semantic judge.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence


@dataclass
class PromptConfig:
    """Configuration for judge prompt formatting."""
    include_question_record: bool = True
    include_keywords: bool = True
    system_prompt: Optional[str] = None


class JudgePromptFormatter:
    """Formats a question and candidate answer into a grading prompt."""

    GRADING_INSTRUCTIONS = [
        "You are an experienced, objective, and kind human grader for exam answers.",
        "For each candidate answer, output a valid JSON ONLY with the keys:",
        "- correct: true or false (true if the answer is fully correct)",
        "- feedback: a constructive and encouraging text explaining what was right or missing",
        "- score: a number from 0 to 1 indicating how close the answer is to the ideal answer (partial credit)",
        "Grading rules:",
        "- For MCQs, correct means exact match with the answer key; score is 1 for exact, 0 for wrong.",
        "- For one-liner and fill-in-the-blank answers:",
        "  - Compare for semantic equivalence, ignoring punctuation and case.",
        "  - Look for presence of keywords. If some keywords are missing, deduct partial credit proportional to missing keywords.",
        "  - Accept minor formatting differences or synonyms as correct or mostly correct.",
        "  - If the answer means the same as any accepted answer, mark it correct.",
        "- Provide detailed feedback mentioning any keywords missing or mistakes.",
    ]

    def __init__(self, config: Optional[PromptConfig] = None):
        self.config = config or PromptConfig()

    def format_prompt(self, question: Any, answer: str,
                      reference: Optional[str] = None,
                      accepted_answers: Optional[Sequence[str]] = None) -> str:
        """
        Format the grading prompt.

        Args:
            question: Question record or plain question text
            answer: Candidate answer
            reference: Explicit reference answer, if any
            accepted_answers: Accepted answers / expected keywords

        Returns:
            Prompt text ending with the JSON request
        """
        parts: List[str] = []
        if self.config.system_prompt:
            parts.append(self.config.system_prompt)
        else:
            parts.extend(self.GRADING_INSTRUCTIONS)

        parts.append("Question:")
        parts.append(self._question_text(question))

        if reference:
            parts.append(f"Reference answer: {reference}")
        if self.config.include_keywords and accepted_answers:
            parts.append(f"Expected keywords: {', '.join(accepted_answers)}")

        parts.append("Candidate answer:")
        parts.append(answer or "")
        parts.append("Return JSON now.")

        return "\n".join(part for part in parts if part)

    def _question_text(self, question: Any) -> str:
        if isinstance(question, str):
            return question
        if not self.config.include_question_record:
            return str(getattr(question, 'prompt', question))

        record = {
            'id': getattr(question, 'id', None),
            'type': getattr(getattr(question, 'type', None), 'value', None),
            'topic': getattr(question, 'topic', None),
            'question': getattr(question, 'prompt', None),
        }
        options = getattr(question, 'options', None)
        if options:
            record['options'] = list(options)
        return json.dumps({k: v for k, v in record.items() if v is not None},
                          indent=2, ensure_ascii=False)
