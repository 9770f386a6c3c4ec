"""Submission stores. Inserts are append-only under fresh ids; there is no update."""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from ..logger import get_logger
from .models import PromptSubmission

logger = get_logger(__name__)


class SubmissionStore(ABC):
    """Interface the submission scorer writes to."""

    @abstractmethod
    def insert(self, submission: PromptSubmission) -> None:
        """Store a new submission; raise if its id is taken."""
        pass

    @abstractmethod
    def get(self, submission_id: str) -> Optional[PromptSubmission]:
        """Return the submission with this id, or None."""
        pass

    @abstractmethod
    def list(self) -> List[PromptSubmission]:
        """Return every stored submission."""
        pass


class InMemorySubmissionStore(SubmissionStore):
    """Id-keyed map guarded by a lock; safe to share between threads."""

    def __init__(self):
        self._items: Dict[str, PromptSubmission] = {}
        self._lock = threading.Lock()

    def insert(self, submission: PromptSubmission) -> None:
        with self._lock:
            if submission.id in self._items:
                raise KeyError(f"submission already exists: {submission.id}")
            self._items[submission.id] = submission

    def get(self, submission_id: str) -> Optional[PromptSubmission]:
        with self._lock:
            return self._items.get(submission_id)

    def list(self) -> List[PromptSubmission]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class JsonSubmissionStore(SubmissionStore):
    """One JSON file per submission under ``base_dir``."""

    def __init__(self, base_dir: Path = Path("submissions")):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @staticmethod
    def _sanitize_id(submission_id: str) -> str:
        """Sanitize submission ID to prevent path traversal."""
        sanitized = submission_id.replace("/", "").replace("\\", "").replace("..", "")
        if not sanitized:
            raise ValueError("Invalid submission ID")
        return sanitized

    def _path(self, submission_id: str) -> Path:
        return self.base_dir / f"{self._sanitize_id(submission_id)}.json"

    def insert(self, submission: PromptSubmission) -> None:
        path = self._path(submission.id)
        with self._lock:
            # "x" fails if the file exists
            with open(path, "x", encoding="utf-8") as f:
                json.dump(submission.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug("stored submission %s at %s", submission.id, path)

    def get(self, submission_id: str) -> Optional[PromptSubmission]:
        path = self._path(submission_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return PromptSubmission.from_dict(json.load(f))

    def list(self) -> List[PromptSubmission]:
        submissions = []
        for path in sorted(self.base_dir.glob("*.json")):
            try:
                with open(path, encoding="utf-8") as f:
                    submissions.append(PromptSubmission.from_dict(json.load(f)))
            except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                logger.warning("skipping unreadable submission %s: %s", path.name, e)
        return sorted(submissions, key=lambda s: s.created_at)
