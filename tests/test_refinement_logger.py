"""
Unit tests for the session audit log.

Tests:
- In-memory session lifecycle and caller errors
- File-backed persistence, reload and listing
- Write failures never propagate
"""

import unittest
import tempfile
import shutil
import json
from pathlib import Path

from creature_refiner.core.refinement_logger import RefinementLogger, FileRefinementLogger
from creature_refiner.models import (
    AgentAction,
    Issue,
    IterationRecord,
    SessionMeta,
    SessionSummary,
    SUCCESS,
    NO_IMPROVEMENT,
)


META = SessionMeta(session_name="Refinement Pipeline - Japan", topic="Japan",
                   target_score=4.0, max_iterations=3)


def record(number, before, after):
    return IterationRecord(
        iteration_number=number,
        score_before=before,
        score_after=after,
        issues=[Issue("Major", "Stat Block Balance", "HP too low", "Raise HP",
                      target_generator="statistics", priority="high")],
        actions_taken=[AgentAction("statistics", "- Raise HP", "applied")] if number else [],
        success=after > before,
    )


class TestRefinementLogger(unittest.TestCase):
    """Test the in-memory session lifecycle."""

    def setUp(self):
        self.log = RefinementLogger()

    def test_lifecycle(self):
        """A session opens, records iterations and closes with a summary."""
        session_id = self.log.start_session(META)
        self.log.log_iteration(record(0, 0.0, 3.0))
        self.log.log_iteration(record(1, 3.0, 4.1))
        self.log.complete_session(SessionSummary(4.1, 1, SUCCESS, True))

        session = self.log.session
        self.assertEqual(session.id, session_id)
        self.assertEqual(len(session.iterations), 2)
        self.assertEqual(session.initial_score, 3.0)
        self.assertEqual(session.final_status, SUCCESS)
        self.assertTrue(session.is_closed)
        self.assertIsNotNone(session.total_duration_ms)

    def test_complete_twice_is_an_error(self):
        """Closing a session twice raises RuntimeError."""
        self.log.start_session(META)
        self.log.complete_session(SessionSummary(3.0, 0, NO_IMPROVEMENT, False))
        with self.assertRaises(RuntimeError):
            self.log.complete_session(SessionSummary(3.0, 0, NO_IMPROVEMENT, False))

    def test_log_without_session_is_an_error(self):
        """Logging before a session starts raises RuntimeError."""
        with self.assertRaises(RuntimeError):
            self.log.log_iteration(record(0, 0.0, 3.0))
        with self.assertRaises(RuntimeError):
            self.log.complete_session(SessionSummary(3.0, 0, SUCCESS, True))

    def test_log_after_close_is_an_error(self):
        """Logging after the session closed raises RuntimeError."""
        self.log.start_session(META)
        self.log.complete_session(SessionSummary(3.0, 0, SUCCESS, True))
        with self.assertRaises(RuntimeError):
            self.log.log_iteration(record(1, 3.0, 3.5))

    def test_start_while_open_is_an_error(self):
        """Starting a second session while one is open raises RuntimeError."""
        self.log.start_session(META)
        with self.assertRaises(RuntimeError):
            self.log.start_session(META)

    def test_unknown_status_is_rejected(self):
        """An unknown final status raises ValueError and leaves the session open."""
        self.log.start_session(META)
        with self.assertRaises(ValueError):
            self.log.complete_session(SessionSummary(3.0, 0, "DONE", True))
        self.assertFalse(self.log.session.is_closed)

    def test_new_session_after_close(self):
        """A new session can start once the previous one closed."""
        first = self.log.start_session(META)
        self.log.complete_session(SessionSummary(3.0, 0, SUCCESS, True))
        second = self.log.start_session(META)
        self.assertNotEqual(first, second)


class TestFileRefinementLogger(unittest.TestCase):
    """Test disk persistence."""

    def setUp(self):
        self.work_dir = Path(tempfile.mkdtemp())
        self.log = FileRefinementLogger(self.work_dir)

    def tearDown(self):
        if self.work_dir.exists():
            shutil.rmtree(self.work_dir)

    def _run_session(self):
        session_id = self.log.start_session(META)
        self.log.log_iteration(record(0, 0.0, 3.0))
        self.log.log_iteration(record(1, 3.0, 3.6))
        self.log.attach_artifact("abc123")
        self.log.complete_session(SessionSummary(3.6, 1, NO_IMPROVEMENT, False))
        return session_id

    def test_files_written(self):
        """Session, iteration and event files are written to disk."""
        session_id = self._run_session()
        session_dir = self.work_dir / "sessions" / session_id

        with open(session_dir / "session.json", encoding="utf-8") as f:
            header = json.load(f)
        self.assertEqual(header["final_status"], NO_IMPROVEMENT)
        self.assertEqual(header["iteration_count"], 2)
        self.assertEqual(header["artifact_id"], "abc123")
        self.assertNotIn("iterations", header)

        self.assertTrue((session_dir / "iterations" / "iter0.json").exists())
        self.assertTrue((session_dir / "iterations" / "iter1.json").exists())

        with open(session_dir / "events.jsonl", encoding="utf-8") as f:
            events = [json.loads(line)["type"] for line in f]
        self.assertEqual(events, [
            "session_started",
            "iteration_logged",
            "iteration_logged",
            "artifact_attached",
            "session_completed",
        ])

    def test_load_session(self):
        """A stored session loads back with its iterations."""
        session_id = self._run_session()
        session = FileRefinementLogger(self.work_dir).load_session(session_id)

        self.assertEqual(session.topic, "Japan")
        self.assertEqual([r.iteration_number for r in session.iterations], [0, 1])
        self.assertEqual(session.iterations[1].actions_taken[0].generator, "statistics")
        self.assertEqual(session.iterations[1].issues[0].target_generator, "statistics")

    def test_load_missing_session(self):
        """Loading an unknown session id returns None."""
        self.assertIsNone(self.log.load_session("missing"))

    def test_list_sessions(self):
        """Stored session ids are listed."""
        first = self._run_session()
        second = self._run_session()

        listed = [h["id"] for h in self.log.list_sessions()]
        self.assertEqual(set(listed), {first, second})

    def test_write_failures_are_not_raised(self):
        """Disk write errors are logged instead of raised."""
        blocker = self.work_dir / "blocker"
        blocker.write_text("not a directory")
        log = FileRefinementLogger(blocker)

        session_id = log.start_session(META)
        log.log_iteration(record(0, 0.0, 3.0))
        log.complete_session(SessionSummary(3.0, 0, SUCCESS, True))

        self.assertEqual(log.session.id, session_id)
        self.assertEqual(len(log.session.iterations), 1)
        self.assertEqual(log.list_sessions(), [])


if __name__ == '__main__':
    unittest.main()
