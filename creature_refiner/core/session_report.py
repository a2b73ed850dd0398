"""
Session Report - renders a refinement session as a markdown document.
"""

from pathlib import Path
from typing import List, Optional
from datetime import datetime

from creature_refiner.models import Artifact, Issue, Session, SUCCESS
from creature_refiner.core.issue_classifier import issue_statistics


def write_session_report(
    session: Session,
    output_path: Path,
    artifact: Optional[Artifact] = None,
    remaining_issues: Optional[List[Issue]] = None,
) -> Path:
    """Generate a refinement session report.

    Args:
        session: The (ideally completed) session
        output_path: Where to write the markdown file
        artifact: Final artifact, summarised at the top if given
        remaining_issues: Issues left unresolved on the final artifact

    Returns:
        Path to the generated report
    """
    output_path = Path(output_path)

    report = []
    report.append("# Refinement Session Report\n\n")
    report.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")

    report.append("## Summary\n\n")
    report.append(f"- **Session**: {session.id}\n")
    report.append(f"- **Name**: {session.session_name}\n")
    report.append(f"- **Topic**: {session.topic}\n")
    if artifact is not None:
        report.append(f"- **Creature**: {artifact.name}\n")
    report.append(f"- **Target Score**: {session.target_score:.2f}\n")
    if session.initial_score is not None:
        report.append(f"- **Initial Score**: {session.initial_score:.2f}\n")
    if session.final_score is not None:
        report.append(f"- **Final Score**: {session.final_score:.2f}\n")
    report.append(f"- **Iterations**: {session.total_iterations if session.total_iterations is not None else '-'}"
                  f" / {session.max_iterations}\n")

    if session.final_status == SUCCESS:
        report.append(f"- **Status**: ✅ {session.final_status}\n")
    elif session.final_status:
        report.append(f"- **Status**: ⚠️ {session.final_status}\n")
    else:
        report.append("- **Status**: 🔄 In progress\n")

    if session.total_duration_ms is not None:
        report.append(f"- **Duration**: {session.total_duration_ms / 1000:.1f}s\n")
    if session.artifact_id:
        report.append(f"- **Artifact ID**: {session.artifact_id}\n")
    report.append("\n")

    report.append("## Iteration Summary\n\n")
    report.append("| Iteration | Score Before | Score After | Issues | Actions | Duration | Result |\n")
    report.append("|-----------|--------------|-------------|--------|---------|----------|--------|\n")

    for record in session.iterations:
        result = "✅ Improved" if record.success else "➖ No gain"
        report.append(
            f"| {record.iteration_number} | "
            f"{record.score_before:.2f} | "
            f"{record.score_after:.2f} | "
            f"{len(record.issues)} | "
            f"{len(record.actions_taken)} | "
            f"{record.duration_ms / 1000:.1f}s | "
            f"{result} |\n"
        )
    report.append("\n")

    report.append("## Detailed Iteration Breakdown\n\n")
    for record in session.iterations:
        label = "Initial pass" if record.iteration_number == 0 else f"Round {record.iteration_number}"
        report.append(f"### Iteration {record.iteration_number} ({label})\n\n")

        stats = issue_statistics(record.issues)
        severities = ", ".join(f"{k}={v}" for k, v in stats["by_severity"].items())
        report.append(f"**Issues**: {stats['total']} ({severities})  \n\n")

        if record.actions_taken:
            report.append("| Generator | Outcome | Duration |\n")
            report.append("|-----------|---------|----------|\n")
            for action in record.actions_taken:
                report.append(
                    f"| {action.generator} | {action.outcome} | {action.duration_ms}ms |\n"
                )
            report.append("\n")

        for improvement in record.improvements_summary:
            report.append(f"- {improvement}\n")
        report.append("\n")

    if remaining_issues:
        report.append("## Remaining Issues\n\n")
        for issue in remaining_issues:
            report.append(
                f"- **[{issue.severity}] {issue.category}** "
                f"({issue.target_generator}): {issue.description}\n"
            )
        report.append("\n")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.writelines(report)

    return output_path
