import json
import logging
import os
import threading
from typing import List


logger = logging.getLogger(__name__)

_METRICS_PATH = "storage/metrics.json"

_MAX_LATENCY_HISTORY = 10_000

_lock = threading.Lock()


def _empty_metrics() -> dict:

    return {
        "total_requests": 0,
        "successful_requests": 0,
        "failed_requests": 0,

        "total_latency": 0.0,
        "avg_latency": 0.0,
        "latencies": [],

        # suggestion outcomes
        "suggestion_requests": 0,
        "fallback_responses": 0,
        "fast_path_skips": 0,
        "empty_responses": 0,
    }


class MetricsTracker:

    def __init__(self, path: str = _METRICS_PATH):

        self._path = path

        self._metrics = _empty_metrics()

        self._load()

    def _load(self):

        if not os.path.exists(self._path):
            return

        try:

            with open(self._path, "r") as f:
                data = json.load(f)

            self._metrics.update(data)

        except (OSError, ValueError) as e:

            logger.warning("Metrics file unreadable, starting fresh", extra={"error": str(e)})

    def _save(self):

        directory = os.path.dirname(self._path)

        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self._path, "w") as f:
            json.dump(self._metrics, f, indent=2)

    def record_success(self, latency: float):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["successful_requests"] += 1
            self._metrics["total_latency"] += latency

            self._metrics["avg_latency"] = (
                self._metrics["total_latency"]
                / self._metrics["total_requests"]
            )

            latencies = self._metrics["latencies"]
            latencies.append(latency)
            del latencies[:-_MAX_LATENCY_HISTORY]

            self._save()

    def record_failure(self):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["failed_requests"] += 1

            self._save()

    def record_suggestions(self, count: int, used_fallback: bool, generation_skipped: bool):

        with _lock:

            self._metrics["suggestion_requests"] += 1

            if used_fallback:
                self._metrics["fallback_responses"] += 1

            if generation_skipped:
                self._metrics["fast_path_skips"] += 1

            if count == 0:
                self._metrics["empty_responses"] += 1

            self._save()

    def get_metrics(self):

        metrics = {k: v for k, v in self._metrics.items() if k != "latencies"}

        metrics["p50_latency"] = self.get_latency_percentile(50)
        metrics["p95_latency"] = self.get_latency_percentile(95)

        return metrics

    def get_latency_percentile(self, percentile: float) -> float:

        latencies: List[float] = self._metrics.get("latencies", [])

        if not latencies:
            return 0.0

        sorted_latencies = sorted(latencies)

        index = int(len(sorted_latencies) * percentile / 100)

        index = min(index, len(sorted_latencies) - 1)

        return sorted_latencies[index]


metrics_tracker = MetricsTracker()
