"""
CLI Output Formatting

Rich text formatting utilities for CLI output: the assessment report
(topic metrics, type accuracy, strengths/weaknesses, evidence) and its
JSON form.
"""

import json
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..evaluation.metrics import AssessmentReport
from ..evaluation.types import Verdict

console = Console()


def format_table(data: List[Dict[str, Any]], title: str = "Results",
                 headers: Optional[List[str]] = None) -> Table:
    """
    Format data as a Rich table.

    Args:
        data: List of dictionaries with row data
        title: Table title
        headers: Optional list of column headers (uses keys from first row if not provided)

    Returns:
        Rich Table object
    """
    if not data:
        table = Table(title=title)
        table.add_column("Message", style="dim")
        table.add_row("No data available")
        return table

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold blue")
    for header in headers:
        table.add_column(header, style="white", justify="left")

    for row in data:
        table.add_row(*[str(row.get(header, "N/A")) for header in headers])

    return table


def _percentage_style(value: float) -> str:
    if value >= 80:
        return "green"
    if value >= 60:
        return "yellow"
    return "red"


def report_to_dict(report: AssessmentReport,
                   verdicts: Optional[Mapping[str, Verdict]] = None) -> Dict[str, Any]:
    """Plain-data form of a report, suitable for JSON output."""
    data = asdict(report)
    data['type_accuracy'] = report.type_accuracy.as_dict()
    if report.score_interval is not None:
        data['score_interval'] = list(report.score_interval)
    if verdicts is not None:
        data['verdicts'] = {qid: verdict.to_dict() for qid, verdict in verdicts.items()}
    return data


def format_report_json(report: AssessmentReport,
                       verdicts: Optional[Mapping[str, Verdict]] = None) -> str:
    return json.dumps(report_to_dict(report, verdicts), indent=2, default=str)


def render_report(report: AssessmentReport, show_evidence: bool = True,
                  target: Optional[Console] = None) -> None:
    """
    Print the report as rich tables.

    Args:
        report: Report to render
        show_evidence: Include the per-topic evidence tables
        target: Console to print to (module console if None)
    """
    out = target or console

    summary = (
        f"[bold]Overall score:[/bold] [{_percentage_style(report.overall_score)}]"
        f"{report.overall_score}%[/]\n"
        f"Answered: {report.answered_count}/{report.total_questions}    "
        f"Weighted score: {report.weighted_score:.1f}%"
    )
    if report.score_interval is not None:
        low, high = report.score_interval
        summary += f"\n95% interval on mean score: {low:.1f}% - {high:.1f}%"
    out.print(Panel.fit(summary, title="Assessment Report", border_style="blue"))

    topic_table = Table(title="Topics", show_header=True, header_style="bold blue")
    topic_table.add_column("Topic", style="cyan")
    topic_table.add_column("Questions", justify="right")
    topic_table.add_column("Correct", justify="right")
    topic_table.add_column("Score", justify="right")
    for topic in report.topics:
        style = _percentage_style(topic.percentage)
        topic_table.add_row(topic.topic, str(topic.total_questions), str(topic.correct_count),
                            f"[{style}]{topic.percentage}%[/{style}]")
    out.print(topic_table)

    type_table = Table(title="Accuracy by Question Type", show_header=True, header_style="bold blue")
    type_table.add_column("Type", style="cyan")
    type_table.add_column("Accuracy", justify="right")
    for question_type, percentage in report.type_accuracy.as_dict().items():
        type_table.add_row(question_type, f"{percentage}%")
    out.print(type_table)

    out.print(f"[green]Strengths:[/green] {', '.join(report.strengths) or 'none'}")
    out.print(f"[red]Weaknesses:[/red] {', '.join(report.weaknesses) or 'none'}")

    if not show_evidence:
        return

    for topic in report.topics:
        evidence = [
            {
                'Question': item.question_text,
                'Answer': item.given_answer or '-',
                'Score': f"{item.score:.2f}",
                'Feedback': item.feedback,
            }
            for item in topic.evidence
        ]
        out.print(format_table(evidence, title=f"Evidence: {topic.topic}"))
