"""
Refinement Logger - append-only audit trail of refinement sessions.

Two implementations share one interface:
- RefinementLogger: in-memory, used when persistence is disabled
- FileRefinementLogger: writes every session and iteration to disk

Disk layout of FileRefinementLogger:
    sessions/<session_id>/session.json        session header + outcome
    sessions/<session_id>/iterations/iterN.json
    sessions/<session_id>/events.jsonl        append-only event stream

Write failures on disk are logged and never propagated.
"""

import json
import time
import uuid
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime

from creature_refiner.models import (
    IterationRecord,
    Session,
    SessionMeta,
    SessionSummary,
    FINAL_STATUSES,
)


class RefinementLogger:
    """In-memory session log.

    Usage:
        session_id = logger.start_session(meta)
        logger.log_iteration(record)   # zero or more times
        logger.complete_session(summary)
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.session: Optional[Session] = None
        self._start_time: Optional[float] = None

    @property
    def session_id(self) -> Optional[str]:
        return self.session.id if self.session else None

    def start_session(self, meta: SessionMeta) -> str:
        """Open a new session.

        Args:
            meta: Session parameters

        Returns:
            The new session identifier

        Raises:
            RuntimeError: If a previous session is still open
        """
        if self.session is not None and not self.session.is_closed:
            raise RuntimeError(f"Session {self.session.id} is still open.")

        self.session = Session(
            id=uuid.uuid4().hex,
            session_name=meta.session_name,
            topic=meta.topic,
            target_score=meta.target_score,
            max_iterations=meta.max_iterations,
        )
        self._start_time = time.monotonic()

        self._persist_session()
        self._append_event("session_started", {"session_name": meta.session_name})
        self.logger.info(f"📊 Started refinement session: {self.session.id}")
        return self.session.id

    def log_iteration(self, record: IterationRecord):
        """Append an iteration record to the open session.

        Raises:
            RuntimeError: If no session is open
        """
        session = self._require_open_session()
        session.iterations.append(record)

        self._persist_iteration(record)
        self._append_event(
            "iteration_logged",
            {
                "iteration_number": record.iteration_number,
                "score_before": record.score_before,
                "score_after": record.score_after,
                "success": record.success,
            },
        )
        self.logger.info(
            f"📝 Logged iteration {record.iteration_number}: "
            f"{record.score_before:.2f} -> {record.score_after:.2f}"
        )

    def attach_artifact(self, artifact_id: str):
        """Associate the produced artifact with the open session."""
        session = self._require_open_session()
        session.artifact_id = artifact_id
        self._persist_session()
        self._append_event("artifact_attached", {"artifact_id": artifact_id})

    def complete_session(self, summary: SessionSummary):
        """Close the session. Must be called exactly once per session.

        Raises:
            RuntimeError: If no session is open or it was already completed
            ValueError: If the final status is unknown
        """
        if self.session is None:
            raise RuntimeError("No active session to complete.")
        if self.session.is_closed:
            raise RuntimeError(f"Session {self.session.id} was already completed.")
        if summary.final_status not in FINAL_STATUSES:
            raise ValueError(f"Invalid final status: {summary.final_status}")

        session = self.session
        session.final_score = summary.final_score
        session.total_iterations = summary.total_iterations
        session.final_status = summary.final_status
        session.success_criteria_met = summary.success_criteria_met
        session.total_duration_ms = int((time.monotonic() - (self._start_time or time.monotonic())) * 1000)
        session.completed_at = datetime.now().isoformat()

        self._persist_session()
        self._append_event(
            "session_completed",
            {"final_status": summary.final_status, "final_score": summary.final_score},
        )
        self.logger.info(f"✅ Completed refinement session: {session.id} ({summary.final_status})")

    def _require_open_session(self) -> Session:
        if self.session is None:
            raise RuntimeError("No active session. Call start_session() first.")
        if self.session.is_closed:
            raise RuntimeError(f"Session {self.session.id} is closed.")
        return self.session

    # Persistence hooks (no-ops in memory)

    def _persist_session(self):
        pass

    def _persist_iteration(self, record: IterationRecord):
        pass

    def _append_event(self, event_type: str, data: Dict[str, Any]):
        pass


class FileRefinementLogger(RefinementLogger):
    """Session log persisted as JSON files under `work_dir/sessions`."""

    def __init__(self, work_dir: Path):
        """Initialize the file-backed logger.

        Args:
            work_dir: Root working directory
        """
        super().__init__()
        self.work_dir = Path(work_dir)
        self.sessions_dir = self.work_dir / "sessions"

    def _session_dir(self, session_id: str) -> Path:
        return self.sessions_dir / session_id

    def _write_json(self, path: Path, data: Dict[str, Any]):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to persist {path}: {e}")

    def _persist_session(self):
        if self.session is None:
            return
        header = self.session.to_dict()
        header.pop("iterations", None)
        header["iteration_count"] = len(self.session.iterations)
        self._write_json(self._session_dir(self.session.id) / "session.json", header)

    def _persist_iteration(self, record: IterationRecord):
        if self.session is None:
            return
        path = (self._session_dir(self.session.id) / "iterations"
                / f"iter{record.iteration_number}.json")
        self._write_json(path, record.to_dict())

    def _append_event(self, event_type: str, data: Dict[str, Any]):
        if self.session is None:
            return
        event = {"timestamp": datetime.now().isoformat(), "type": event_type, **data}
        trace_file = self._session_dir(self.session.id) / "events.jsonl"
        try:
            trace_file.parent.mkdir(parents=True, exist_ok=True)
            with open(trace_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(event, ensure_ascii=False) + "\n")
        except OSError as e:
            self.logger.warning(f"Failed to append event {event_type}: {e}")

    def load_session(self, session_id: str) -> Optional[Session]:
        """Load a stored session with all of its iterations.

        Returns:
            Session, or None if it does not exist or cannot be read
        """
        session_dir = self._session_dir(session_id)
        header_path = session_dir / "session.json"
        if not header_path.exists():
            return None

        try:
            with open(header_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            records = []
            for record_file in (session_dir / "iterations").glob("iter*.json"):
                with open(record_file, 'r', encoding='utf-8') as f:
                    records.append(json.load(f))
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load session {session_id}: {e}")
            return None

        records.sort(key=lambda r: r.get("iteration_number", 0))
        data["iterations"] = records
        return Session.from_dict(data)

    def list_sessions(self) -> List[Dict[str, Any]]:
        """List stored session headers, newest first."""
        headers = []
        if not self.sessions_dir.exists():
            return headers

        for header_path in self.sessions_dir.glob("*/session.json"):
            try:
                with open(header_path, 'r', encoding='utf-8') as f:
                    headers.append(json.load(f))
            except (OSError, ValueError) as e:
                self.logger.warning(f"Skipping unreadable session {header_path}: {e}")

        headers.sort(key=lambda h: h.get("started_at", ""), reverse=True)
        return headers
