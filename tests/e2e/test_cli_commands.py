"""
End-to-End Tests for CLI Commands

Runs the click commands against question and answer files on disk and
checks output formats, exit codes and error handling for invalid inputs.
"""

import json

import pytest
import yaml
from click.testing import CliRunner
from unittest.mock import patch

from assessgrade.main import cli


@pytest.mark.e2e
class TestCLICommands:
    """Test CLI commands end-to-end."""

    @pytest.fixture
    def runner(self):
        """CLI runner for testing."""
        return CliRunner()

    @pytest.fixture
    def questions_file(self, temp_dir, sample_questions_data):
        path = temp_dir / "questions.json"
        path.write_text(json.dumps(sample_questions_data))
        return path

    @pytest.fixture
    def answers_file(self, temp_dir):
        path = temp_dir / "answers.yaml"
        path.write_text(yaml.safe_dump({"answers": {
            "q1": "B",
            "q2": "Caching at the edge",
            "q3": ["websockets", "tailwind css"],
            "q4": "a while ago",
        }}))
        return path

    def test_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert "grade" in result.output
        assert "config" in result.output

    def test_grade_terminal_output(self, runner, questions_file, answers_file):
        result = runner.invoke(cli, ['grade', str(questions_file), str(answers_file)])

        assert result.exit_code == 0, result.output
        assert "Assessment Report" in result.output
        assert "Overall score:" in result.output
        assert "71%" in result.output
        assert "Networking" in result.output

    def test_grade_json_output(self, runner, questions_file, answers_file):
        result = runner.invoke(cli, ['grade', str(questions_file), str(answers_file),
                                     '--format', 'json'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data['overall_score'] == 71
        assert [t['topic'] for t in data['topics']] == ["Networking", "Frontend"]
        assert data['strengths'] == ["Networking"]
        assert data['weaknesses'] == ["Frontend"]
        assert data['type_accuracy'] == {"mcq": 100, "oneLiner": 50, "fillBlank": 100}
        assert data['verdicts']['q1']['feedback'] == "Correct!"
        assert data['verdicts']['q4']['feedback'] == 'Expected similar to "23 July 2025"'

    def test_grade_without_evidence(self, runner, questions_file, answers_file):
        result = runner.invoke(cli, ['grade', str(questions_file), str(answers_file),
                                     '--no-evidence'])
        assert result.exit_code == 0, result.output
        assert "Evidence:" not in result.output

    def test_grade_ignores_unknown_answer_ids(self, runner, questions_file, temp_dir):
        answers = temp_dir / "answers.json"
        answers.write_text(json.dumps({"q1": "B", "q99": "x"}))

        result = runner.invoke(cli, ['grade', str(questions_file), str(answers)])

        assert result.exit_code == 0, result.output
        assert "q99" in result.output
        assert "Answered: 1/4" in result.output

    def test_grade_invalid_questions_file(self, runner, temp_dir, answers_file):
        bad = temp_dir / "bad.json"
        bad.write_text(json.dumps([{"id": "x", "type": "essay", "question": "Q?"}]))

        result = runner.invoke(cli, ['grade', str(bad), str(answers_file)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_grade_missing_file(self, runner, temp_dir, answers_file):
        result = runner.invoke(cli, ['grade', str(temp_dir / "nope.json"), str(answers_file)])
        assert result.exit_code != 0

    def test_grade_with_confirmation(self, runner, questions_file, answers_file, mock_judge):
        with patch('assessgrade.commands.grade.GeminiJudge', return_value=mock_judge):
            result = runner.invoke(cli, ['grade', str(questions_file), str(answers_file),
                                         '--confirm', '--format', 'json'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data['verdicts']['q2']['confirmed'] is True
        assert data['verdicts']['q2']['feedback'] == "Looks right."
        assert data['verdicts']['q1']['confirmed'] is False
        assert data['metadata']['confirmed_count'] == 3
        mock_judge.close.assert_awaited_once()

    def test_grade_confirm_without_api_key(self, runner, questions_file, answers_file):
        with patch.dict('os.environ', {}, clear=True):
            result = runner.invoke(cli, ['grade', str(questions_file), str(answers_file),
                                         '--confirm'])

        assert result.exit_code == 1
        assert "GEMINI_API_KEY" in result.output

    def test_config_show_json(self, runner):
        result = runner.invoke(cli, ['config', 'show', '--format', 'json'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data['name'] == "assessgrade-test"
        assert data['grading']['correct_threshold'] == 0.8
        assert data['judge']['max_concurrent'] == 2

    def test_config_show_yaml(self, runner):
        result = runner.invoke(cli, ['config', 'show', '--format', 'yaml'])

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(result.stdout)
        assert data['reporting']['strength_threshold'] == 80

    def test_config_show_table(self, runner):
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == 0, result.output
        assert "Configuration" in result.output
