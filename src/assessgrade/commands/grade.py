"""
Grade Command

Grades a file of answers against a file of questions and prints the
assessment report.
"""

import asyncio
import sys
from typing import Any, Dict, List

import click
from rich.console import Console

from ..cli.formatting import format_report_json, render_report
from ..core.exceptions import AssessGradeException
from ..evaluation.session import AssessmentSession
from ..evaluation.types import Question
from ..judge.gemini import GeminiJudge
from ..utils.logging import get_logger
from ..utils.validation import load_answers, load_questions

console = Console()
logger = get_logger(__name__)


async def _grade_with_judge(session: AssessmentSession, answers: Dict[str, Any],
                            judge: GeminiJudge) -> None:
    """Submit through the judge fallback, then run one confirmation sweep."""
    try:
        for question in session.questions:
            if question.id in answers:
                await session.submit_async(question.id, answers[question.id])
        result = await session.confirm_pending()
        logger.info(f"Confirmation sweep processed {result.processed} verdict(s)")
    finally:
        await judge.close()


def _check_answer_ids(questions: List[Question], answers: Dict[str, Any]) -> None:
    known = {q.id for q in questions}
    unknown = [qid for qid in answers if qid not in known]
    if unknown:
        console.print(f"[yellow]Ignoring answers for unknown question id(s): "
                      f"{', '.join(unknown)}[/yellow]")
        for qid in unknown:
            del answers[qid]


@click.command()
@click.argument('questions_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('answers_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--confirm', is_flag=True,
              help='Use the semantic judge for ungraded answers and confirm free-text verdicts')
@click.option('--format', 'output_format', type=click.Choice(['terminal', 'json']),
              default='terminal', help='Output format')
@click.option('--evidence/--no-evidence', default=True, help='Show per-topic evidence tables')
@click.pass_context
def grade(ctx, questions_file, answers_file, confirm, output_format, evidence):
    """Grade answers and print the assessment report.

    \b
    EXAMPLES:

    assessgrade grade questions.yaml answers.yaml
    assessgrade grade questions.json answers.json --format json
    assessgrade grade questions.yaml answers.yaml --confirm

    \b
    Answers map question ids to a string, or to a list of strings for
    fill-in-the-blank questions. --confirm needs the judge API key in the
    environment.
    """
    config = ctx.obj.get('config') if ctx.obj else None

    try:
        questions = load_questions(questions_file)
        answers = load_answers(answers_file)
        _check_answer_ids(questions, answers)

        if confirm:
            judge = GeminiJudge(config=config.judge if config else None)
            session = AssessmentSession(questions, judge=judge, config=config)
            asyncio.run(_grade_with_judge(session, answers, judge))
        else:
            session = AssessmentSession(questions, config=config)
            session.submit_all(answers)

        report = session.report()

    except AssessGradeException as e:
        logger.error(f"Grading failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if output_format == 'json':
        click.echo(format_report_json(report, session.verdicts()))
    else:
        render_report(report, show_evidence=evidence)
