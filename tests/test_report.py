"""
Tests for the markdown session report.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

from creature_refiner.core.session_report import write_session_report
from creature_refiner.models import (
    AgentAction,
    Artifact,
    Issue,
    IterationRecord,
    Session,
    SUCCESS,
)


class TestSessionReport(unittest.TestCase):
    """Test report rendering."""

    def setUp(self):
        self.work_dir = Path(tempfile.mkdtemp())
        self.issue = Issue("Minor", "Quality", "Prose is long", "Tighten it",
                           target_generator="narrative", priority="normal")
        self.session = Session(
            id="s1",
            session_name="Refinement Pipeline - Japan",
            topic="Japan",
            target_score=4.0,
            max_iterations=3,
            iterations=[
                IterationRecord(0, 0.0, 3.2, success=True, duration_ms=1200),
                IterationRecord(
                    1, 3.2, 4.1,
                    issues=[self.issue],
                    actions_taken=[AgentAction("narrative", "- Rename it", "applied", duration_ms=800)],
                    improvements_summary=["Revised narrative: Mistborn Nue"],
                    success=True,
                    duration_ms=2500,
                ),
            ],
            final_status=SUCCESS,
            final_score=4.1,
            total_iterations=1,
            success_criteria_met=True,
            total_duration_ms=3700,
            artifact_id="a1",
        )

    def tearDown(self):
        if self.work_dir.exists():
            shutil.rmtree(self.work_dir)

    def test_report_contents(self):
        """The report holds the summary, iteration table and open issues."""
        path = write_session_report(
            self.session,
            self.work_dir / "reports" / "session.md",
            artifact=Artifact(name="Mistborn Nue", topic="Japan"),
            remaining_issues=[self.issue],
        )

        content = path.read_text(encoding="utf-8")
        self.assertIn("# Refinement Session Report", content)
        self.assertIn("- **Creature**: Mistborn Nue", content)
        self.assertIn("- **Initial Score**: 3.20", content)
        self.assertIn("- **Final Score**: 4.10", content)
        self.assertIn("✅ SUCCESS", content)
        self.assertIn("| 1 | 3.20 | 4.10 | 1 | 1 | 2.5s | ✅ Improved |", content)
        self.assertIn("| narrative | applied | 800ms |", content)
        self.assertIn("- Revised narrative: Mistborn Nue", content)
        self.assertIn("## Remaining Issues", content)
        self.assertIn("**[Minor] Quality** (narrative): Prose is long", content)

    def test_open_session(self):
        """A session that is still open is reported as in progress."""
        session = Session(id="s2", session_name="n", topic="Greece", target_score=4.0, max_iterations=3)
        path = write_session_report(session, self.work_dir / "open.md")

        content = path.read_text(encoding="utf-8")
        self.assertIn("🔄 In progress", content)
        self.assertNotIn("## Remaining Issues", content)


if __name__ == '__main__':
    unittest.main()
