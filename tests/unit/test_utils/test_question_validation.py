"""
Tests for question payload validation and file loading
"""

import json

import pytest
import yaml

from assessgrade.core.exceptions import ValidationError
from assessgrade.evaluation.grader import AnswerGrader
from assessgrade.evaluation.types import QuestionType
from assessgrade.utils.validation import load_answers, load_questions, validate_question_data


class TestValidateQuestionData:
    """Test cases for validate_question_data."""

    def test_camel_case_payload(self, sample_questions_data):
        question = validate_question_data(sample_questions_data[0])

        assert question.id == "q1"
        assert question.type == QuestionType.MCQ
        assert question.prompt.startswith("Which protocol")
        assert question.answer_key == "B"
        assert question.options == ("A. HTTP/1.0", "B. WebSocket", "C. FTP", "D. SMTP")

    def test_sentence_alias_for_fill_blank(self, sample_questions_data):
        question = validate_question_data(sample_questions_data[2])
        assert question.type == QuestionType.FILL_BLANK
        assert question.slot_count() == 2

    def test_snake_case_payload(self):
        question = validate_question_data({
            "id": "x", "type": "oneLiner", "prompt": "Why?",
            "answer_key": "because", "accepted_answers": ["since"], "case_sensitive": "yes",
        })
        assert question.answer_key == "because"
        assert question.accepted_answers == ("since",)
        assert question.case_sensitive is True

    def test_numeric_values_become_text(self):
        question = validate_question_data({
            "id": 7, "type": "oneLiner", "question": "When?", "correctAnswer": 2025,
            "keywords": [[2025, "twenty twenty-five"]],
        })
        assert question.id == "7"
        assert question.answer_key == "2025"
        assert question.keywords == [["2025", "twenty twenty-five"]]

    def test_null_ground_truth_members_accepted(self):
        question = validate_question_data({
            "id": "x", "type": "fillBlank", "sentence": "Use ___ with ___.",
            "acceptable": [["websockets", None], None],
        })
        assert question.acceptable == [["websockets", None], None]

        verdict = AnswerGrader().grade(question, ["websockets", "anything"])
        assert verdict.score == 0.5
        assert "blank 2" in verdict.feedback

    def test_null_keyword_group_accepted(self):
        question = validate_question_data({
            "id": "x", "type": "oneLiner", "question": "Why?", "keywords": [["edge"], None],
        })
        assert question.keywords == [["edge"], None]

    def test_topic_defaults_to_general(self):
        question = validate_question_data({"id": "x", "type": "mcq", "question": "Q?", "topic": " "})
        assert question.topic == "General"

    @pytest.mark.parametrize("payload,field_name", [
        ({"id": " ", "type": "mcq", "question": "Q?"}, "id"),
        ({"id": "x", "type": "essay", "question": "Q?"}, "type"),
        ({"id": "x", "type": "mcq"}, "prompt"),
        ({"id": "x", "type": "mcq", "question": "Q?", "marks": -1}, "marks"),
    ])
    def test_invalid_payloads(self, payload, field_name):
        with pytest.raises(ValidationError) as exc_info:
            validate_question_data(payload)
        assert exc_info.value.field_name == field_name

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError):
            validate_question_data(["not", "a", "dict"])


class TestLoadFiles:
    """Test cases for question and answer file loading."""

    def test_load_questions_json_list(self, temp_dir, sample_questions_data):
        path = temp_dir / "questions.json"
        path.write_text(json.dumps(sample_questions_data))

        questions = load_questions(path)

        assert [q.id for q in questions] == ["q1", "q2", "q3", "q4"]

    def test_load_questions_yaml_mapping(self, temp_dir, sample_questions_data):
        path = temp_dir / "questions.yaml"
        path.write_text(yaml.safe_dump({"questions": sample_questions_data}))

        assert len(load_questions(path)) == 4

    def test_duplicate_ids_rejected(self, temp_dir, sample_questions_data):
        path = temp_dir / "questions.json"
        path.write_text(json.dumps(sample_questions_data + [sample_questions_data[0]]))

        with pytest.raises(ValidationError, match="Duplicate question id"):
            load_questions(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ValidationError, match="File not found"):
            load_questions(temp_dir / "nope.json")

    def test_unparseable_file(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ValidationError, match="Could not parse"):
            load_questions(path)

    def test_questions_must_be_a_list(self, temp_dir):
        path = temp_dir / "questions.yaml"
        path.write_text("questions: 3\n")

        with pytest.raises(ValidationError):
            load_questions(path)

    def test_load_answers(self, temp_dir):
        path = temp_dir / "answers.yaml"
        path.write_text(yaml.safe_dump({"answers": {"q1": "B", "q3": ["websockets", None], 5: 42}}))

        answers = load_answers(path)

        assert answers == {"q1": "B", "q3": ["websockets", ""], "5": "42"}

    def test_load_answers_rejects_list(self, temp_dir):
        path = temp_dir / "answers.json"
        path.write_text(json.dumps(["B"]))

        with pytest.raises(ValidationError):
            load_answers(path)
