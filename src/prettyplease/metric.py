import re

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

push_registry = CollectorRegistry()

api_call_count = Counter(
    "prettyplease_num_api_calls",
    "Total number of GitHub API calls",
    labelnames=["endpoint"],
    registry=push_registry,
)

run_outcome_counter = Counter(
    "prettyplease_run_outcome",
    "Number of runs by terminal outcome",
    labelnames=["outcome", "reason"],
    registry=push_registry,
)

formatted_files_counter = Counter(
    "prettyplease_num_formatted_files",
    "Number of files run through the formatter",
    labelnames=["changed"],
    registry=push_registry,
)

error_counter = Counter(
    "prettyplease_error_counter",
    "Total number of errors",
    labelnames=["context"],
    registry=push_registry,
)


_REPO_PREFIX = re.compile(r"^(https?://[^/]+)?/repos/[^/]+/[^/]+/")


def _normalize_api_endpoint(endpoint: str) -> str:
    path = endpoint.split("?", 1)[0]
    path = _REPO_PREFIX.sub("", path)
    if path.startswith("/app/installations/") and path.endswith("/access_tokens"):
        return "installation_token"
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        return "unknown"
    if parts[0] == "pulls" and len(parts) > 2 and parts[2] == "files":
        return "pulls/files"
    if parts[0] == "issues" and len(parts) > 2 and parts[2] == "comments":
        return "issues/comments"
    return parts[0]


def record_api_call(endpoint: str) -> None:
    api_call_count.labels(endpoint=_normalize_api_endpoint(endpoint)).inc()


def push_metrics(gateway: str) -> None:
    push_to_gateway(gateway, job="prettyplease", registry=push_registry)
