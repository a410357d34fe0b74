# typeahead/memory/registry.py

import json
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = "storage/training_registry.json"


class TrainingRegistry:
    """
    Persistent index of trained documents.

    Chunks live in Qdrant; this keeps the per-document view (name, chunk
    count, training time) for listing, stats and forgetting.
    """

    def __init__(self, path: str = DEFAULT_REGISTRY_PATH):

        self._path = path
        self._documents: Dict[str, dict] = {}
        self._lock = threading.Lock()

        self._load()

    def _load(self):

        if not os.path.exists(self._path):
            logger.info("Training registry file not found. Starting fresh.")
            return

        try:

            with open(self._path, "r") as f:
                self._documents = json.load(f)

            logger.info(
                "Training registry loaded",
                extra={"documents": len(self._documents)},
            )

        except (OSError, ValueError) as e:

            logger.error(
                "Training registry load failed",
                extra={"error": str(e)},
            )

    def _save(self):

        directory = os.path.dirname(self._path)

        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self._path, "w") as f:
            json.dump(self._documents, f)

    # ============================================================
    # PUBLIC API
    # ============================================================

    def register(self, doc_id: str, filename: str, chunks_count: int) -> dict:

        entry = {
            "filename": filename,
            "chunks_count": chunks_count,
            "upload_timestamp": datetime.now(timezone.utc).isoformat(),
        }

        with self._lock:
            self._documents[doc_id] = entry
            self._save()

        return entry

    def remove(self, doc_id: str) -> bool:

        with self._lock:

            if doc_id not in self._documents:
                return False

            del self._documents[doc_id]
            self._save()

        return True

    def get(self, doc_id: str) -> Optional[dict]:
        return self._documents.get(doc_id)

    def list(self) -> List[dict]:

        return [
            {"document_id": doc_id, **meta}
            for doc_id, meta in self._documents.items()
        ]

    def stats(self) -> dict:

        documents = list(self._documents.values())

        timestamps = [d["upload_timestamp"] for d in documents if d.get("upload_timestamp")]

        return {
            "total_documents": len(documents),
            "total_chunks": sum(d.get("chunks_count", 0) for d in documents),
            "last_trained_at": max(timestamps) if timestamps else None,
        }
