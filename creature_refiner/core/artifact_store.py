"""
Artifact Store - persists finished creature profiles as JSON.

Saving is fire-and-forget from the controller's perspective: any failure is
logged and reported as a missing artifact id, never raised.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime

from creature_refiner.models import Artifact


class ArtifactStore:
    """Stores artifacts under `work_dir/artifacts/<artifact_id>.json`."""

    def __init__(self, work_dir: Path):
        self.work_dir = Path(work_dir)
        self.artifacts_dir = self.work_dir / "artifacts"
        self.logger = logging.getLogger(__name__)

    def save_artifact(
        self,
        artifact: Artifact,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Save an artifact together with its refinement metadata.

        Args:
            artifact: The artifact to store
            metadata: Refinement metadata (scores, iterations, session id)

        Returns:
            The new artifact id, or None if the write failed
        """
        artifact_id = uuid.uuid4().hex
        document = {
            "id": artifact_id,
            "saved_at": datetime.now().isoformat(),
            "artifact": artifact.to_dict(),
            "refinement": metadata or {},
        }

        path = self.artifacts_dir / f"{artifact_id}.json"
        try:
            self.artifacts_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to save artifact '{artifact.name}': {e}")
            return None

        self.logger.info(f"💾 Saved artifact {artifact.name} with ID: {artifact_id}")
        return artifact_id

    def load_artifact(self, artifact_id: str) -> Optional[Dict[str, Any]]:
        """Load a stored artifact document.

        Returns:
            Dict with 'artifact' (Artifact) and 'refinement' metadata, or None
        """
        path = self.artifacts_dir / f"{artifact_id}.json"
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load artifact {artifact_id}: {e}")
            return None

        document["artifact"] = Artifact.from_dict(document.get("artifact", {}))
        return document

    def list_artifacts(self) -> List[str]:
        if not self.artifacts_dir.exists():
            return []
        return sorted(p.stem for p in self.artifacts_dir.glob("*.json"))
