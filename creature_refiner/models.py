"""
Data models for the creature refinement pipeline.

This module defines the core data structures used throughout the system:
- Artifact: The multi-component creature profile under refinement
- Issue / Review: Structured quality review output
- AgentAction / IterationRecord / Session: The refinement audit trail
- RefinementConfig / RefinementResult: Run configuration and outcome
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from datetime import datetime
import copy
import math


# Generator names (one per artifact component)
NARRATIVE = "narrative"
STATISTICS = "statistics"
CITATIONS = "citations"
ART_DIRECTION = "art_direction"
LAYOUT = "layout"

# Generators that can be asked to rework a component during refinement
REWORK_GENERATORS = [NARRATIVE, STATISTICS, CITATIONS, ART_DIRECTION]

# Severity levels
CRITICAL = "Critical"
MAJOR = "Major"
MINOR = "Minor"

SEVERITY_LEVELS = [CRITICAL, MAJOR, MINOR]
ACTIONABLE_SEVERITIES = {CRITICAL, MAJOR}

# Routing priorities
PRIORITY_LEVELS = ["immediate", "high", "normal"]

SEVERITY_TO_PRIORITY = {
    CRITICAL: "immediate",
    MAJOR: "high",
    MINOR: "normal",
}

# Review categories the reviewer is prompted with. Other values are accepted.
ISSUE_CATEGORIES = [
    "Name Distinctiveness",
    "Cultural Authenticity",
    "Stat Block Balance",
    "Consistency",
    "Quality",
]

# Review status
REVIEW_STATUS = {
    "pass": "pass",
    "needs_revision": "needs_revision",
}

# Session final status
SUCCESS = "SUCCESS"
MAX_ITERATIONS_REACHED = "MAX_ITERATIONS_REACHED"
NO_IMPROVEMENT = "NO_IMPROVEMENT"
ERROR = "ERROR"

FINAL_STATUSES = [SUCCESS, MAX_ITERATIONS_REACHED, NO_IMPROVEMENT, ERROR]


def _now() -> str:
    return datetime.now().isoformat()


def normalize_severity(value: Any) -> str:
    """Map a raw severity string onto Critical/Major/Minor (default Minor)."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        for level in SEVERITY_LEVELS:
            if lowered == level.lower():
                return level
    return MINOR


@dataclass
class Citation:
    """A single reference record backing the creature's lore."""

    title: str
    url: str = ""
    source_type: str = ""
    relevance_note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Citation":
        """Create a Citation, accepting the short 'source'/'relevance' keys too."""
        return cls(
            title=str(data.get("title") or "Untitled source"),
            url=str(data.get("url") or ""),
            source_type=str(data.get("source_type") or data.get("sourceType") or data.get("source") or ""),
            relevance_note=str(
                data.get("relevance_note") or data.get("relevanceNote") or data.get("relevance") or ""
            ),
        )


@dataclass
class ArtDirection:
    """Visual brief for the creature illustration."""

    visual_prompt: str
    style_tag: str = ""
    rationale: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtDirection":
        return cls(
            visual_prompt=str(data.get("visual_prompt") or data.get("visualPrompt") or data.get("prompt") or ""),
            style_tag=str(data.get("style_tag") or data.get("styleTag") or data.get("style") or ""),
            rationale=str(data.get("rationale") or ""),
        )


@dataclass
class Artifact:
    """The work-in-progress creature profile.

    Components are replaced wholesale when a generator reworks them.

    Attributes:
        name: Creature name
        topic: Cultural origin tag the creature was generated for
        narrative: Narrative lore text
        statistics: Structured game statistics block
        citations: Ordered list of reference records
        art_direction: Visual brief (None until generated)
        layout: Rendering layout, produced only after refinement concludes
    """

    name: str
    topic: str
    narrative: str = ""
    statistics: Dict[str, Any] = field(default_factory=dict)
    citations: List[Citation] = field(default_factory=list)
    art_direction: Optional[ArtDirection] = None
    layout: Optional[Dict[str, Any]] = None

    def snapshot(self) -> "Artifact":
        """Return an independent deep copy of this artifact."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "topic": self.topic,
            "narrative": self.narrative,
            "statistics": self.statistics,
            "citations": [c.to_dict() for c in self.citations],
            "art_direction": self.art_direction.to_dict() if self.art_direction else None,
            "layout": self.layout,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artifact":
        art = data.get("art_direction")
        return cls(
            name=data.get("name", ""),
            topic=data.get("topic", ""),
            narrative=data.get("narrative", ""),
            statistics=data.get("statistics") or {},
            citations=[Citation.from_dict(c) for c in data.get("citations") or []],
            art_direction=ArtDirection.from_dict(art) if art else None,
            layout=data.get("layout"),
        )


@dataclass(frozen=True)
class Issue:
    """A single problem reported by the reviewer.

    `target_generator` and `priority` are empty until the issue is classified.
    """

    severity: str
    category: str
    description: str
    suggestion: str
    target_generator: Optional[str] = None
    priority: Optional[str] = None

    @property
    def is_actionable(self) -> bool:
        return self.severity in ACTIONABLE_SEVERITIES

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """Create Issue from a raw reviewer dictionary, filling safe defaults."""
        return cls(
            severity=normalize_severity(data.get("severity")),
            category=str(data.get("category") or "Quality"),
            description=str(data.get("description") or data.get("issue") or "Unknown issue"),
            suggestion=str(
                data.get("suggestion") or data.get("recommendation") or "No suggestion provided"
            ),
            target_generator=data.get("target_generator") or None,
            priority=data.get("priority") or None,
        )


@dataclass(frozen=True)
class Review:
    """Structured output of one quality review. Never mutated."""

    overall_score: float
    status: str
    issues: List[Issue] = field(default_factory=list)
    summary: str = ""
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "status": self.status,
            "issues": [i.to_dict() for i in self.issues],
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        """Build a Review from raw reviewer JSON.

        Raises:
            ValueError: If the payload carries no finite numeric overall score
        """
        if not isinstance(data, dict):
            raise ValueError(f"Review payload must be an object, got {type(data).__name__}")

        raw_score = data.get("overall_score", data.get("overallScore", data.get("score")))
        if isinstance(raw_score, bool) or raw_score is None:
            raise ValueError("Review payload has no overall score")
        try:
            score = float(raw_score)
        except (TypeError, ValueError):
            raise ValueError(f"Review score is not numeric: {raw_score!r}")
        if not math.isfinite(score):
            raise ValueError(f"Review score is not finite: {raw_score!r}")

        raw_issues = data.get("issues") or []
        if not isinstance(raw_issues, list):
            raw_issues = []
        issues = [Issue.from_dict(i) for i in raw_issues if isinstance(i, dict)]

        status = str(data.get("status") or "").lower()
        if status not in REVIEW_STATUS:
            has_actionable = any(i.is_actionable for i in issues)
            status = "needs_revision" if has_actionable else "pass"

        recommendations = data.get("recommendations") or []
        if isinstance(recommendations, str):
            recommendations = [recommendations]

        return cls(
            overall_score=score,
            status=status,
            issues=issues,
            summary=str(data.get("summary") or data.get("feedback") or ""),
            recommendations=[str(r) for r in recommendations],
        )


@dataclass
class AgentAction:
    """One generator invocation made during a refinement round."""

    generator: str
    feedback_given: str
    outcome: str
    success: bool = True
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentAction":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class IterationRecord:
    """Audit record for one round (0 = initial pass, 1..N = refinement rounds).

    Attributes:
        iteration_number: Round index
        score_before: Score entering the round (0 for the initial pass)
        score_after: Score produced by this round's review
        issues: Classified issues of this round's review
        actions_taken: Generator invocations made in this round
        improvements_summary: Human-readable list of applied changes
        duration_ms: Wall-clock duration of the round
        success: Whether the score improved or the target was met
        timestamp: ISO format timestamp of record creation
    """

    iteration_number: int
    score_before: float
    score_after: float
    issues: List[Issue] = field(default_factory=list)
    actions_taken: List[AgentAction] = field(default_factory=list)
    improvements_summary: List[str] = field(default_factory=list)
    duration_ms: int = 0
    success: bool = False
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration_number": self.iteration_number,
            "score_before": self.score_before,
            "score_after": self.score_after,
            "issues": [i.to_dict() for i in self.issues],
            "actions_taken": [a.to_dict() for a in self.actions_taken],
            "improvements_summary": list(self.improvements_summary),
            "duration_ms": self.duration_ms,
            "success": self.success,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IterationRecord":
        return cls(
            iteration_number=int(data["iteration_number"]),
            score_before=float(data.get("score_before", 0.0)),
            score_after=float(data.get("score_after", 0.0)),
            issues=[Issue.from_dict(i) for i in data.get("issues", [])],
            actions_taken=[AgentAction.from_dict(a) for a in data.get("actions_taken", [])],
            improvements_summary=list(data.get("improvements_summary", [])),
            duration_ms=int(data.get("duration_ms", 0)),
            success=bool(data.get("success", False)),
            timestamp=data.get("timestamp") or _now(),
        )


@dataclass
class SessionMeta:
    """Parameters supplied when a refinement session is opened."""

    session_name: str
    topic: str
    target_score: float
    max_iterations: int


@dataclass
class SessionSummary:
    """Outcome supplied when a refinement session is closed."""

    final_score: float
    total_iterations: int
    final_status: str
    success_criteria_met: bool


@dataclass
class Session:
    """Audit record of one complete refinement run."""

    id: str
    session_name: str
    topic: str
    target_score: float
    max_iterations: int
    iterations: List[IterationRecord] = field(default_factory=list)
    final_status: Optional[str] = None
    final_score: Optional[float] = None
    total_iterations: Optional[int] = None
    success_criteria_met: Optional[bool] = None
    total_duration_ms: Optional[int] = None
    artifact_id: Optional[str] = None
    started_at: str = field(default_factory=_now)
    completed_at: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.completed_at is not None

    @property
    def initial_score(self) -> Optional[float]:
        if not self.iterations:
            return None
        return self.iterations[0].score_after

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if k != "iterations"}
        data["iterations"] = [r.to_dict() for r in self.iterations]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        valid_fields = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in data.items() if k in valid_fields and k != "iterations"}
        session = cls(**filtered)
        session.iterations = [IterationRecord.from_dict(r) for r in data.get("iterations", [])]
        return session


@dataclass
class RefinementConfig:
    """Configuration for a single refinement run.

    Attributes:
        target_score: Review score at or above which the run succeeds
        max_iterations: Maximum number of refinement rounds after the initial pass
        enable_logging: Whether a session audit log is kept
        enable_persistence: Whether the log and the final artifact are written to disk
        generate_layout: Whether the layout generator runs after refinement
        parallel_generation: Fan out independent generator calls on a thread pool
        max_workers: Thread pool size for fan-out
        min_improvement: Score delta a round must exceed to count as improvement
    """

    target_score: float = 4.0
    max_iterations: int = 3
    enable_logging: bool = True
    enable_persistence: bool = True
    generate_layout: bool = True
    parallel_generation: bool = True
    max_workers: int = 4
    min_improvement: float = 0.0

    def __post_init__(self):
        """Validate run configuration."""
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.target_score <= 0:
            raise ValueError(f"target_score must be positive, got {self.target_score}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.min_improvement < 0:
            raise ValueError(f"min_improvement must be >= 0, got {self.min_improvement}")


@dataclass
class RefinementResult:
    """Outcome of a refinement run.

    Attributes:
        artifact: Best-scoring artifact seen during the run
        final_score: Score of that artifact
        iterations_used: Number of refinement rounds executed (initial pass excluded)
        success: True iff the target score was reached
        status: One of FINAL_STATUSES
        session_id: Session identifier when logging is enabled
        artifact_id: Stored artifact identifier when persistence succeeded
        improvements: Descriptions of every applied or failed rework
        remaining_issues: Classified issues of the best artifact's review
        history: Every IterationRecord produced by the run
        session: Closed session record when logging is enabled
    """

    artifact: Artifact
    final_score: float
    iterations_used: int
    success: bool
    status: str
    session_id: Optional[str] = None
    artifact_id: Optional[str] = None
    improvements: List[str] = field(default_factory=list)
    remaining_issues: List[Issue] = field(default_factory=list)
    history: List[IterationRecord] = field(default_factory=list)
    session: Optional[Session] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": self.artifact.to_dict(),
            "final_score": self.final_score,
            "iterations_used": self.iterations_used,
            "success": self.success,
            "status": self.status,
            "session_id": self.session_id,
            "artifact_id": self.artifact_id,
            "improvements": list(self.improvements),
            "remaining_issues": [i.to_dict() for i in self.remaining_issues],
        }
