"""Prometheus metrics for the verifierd daemon."""

from prometheus_client import Counter

VERIFY_CONTRACT = Counter(
    "verify_contract",
    "Verification requests by outcome",
    ["chain_id", "language", "status", "input"],
)


def count_verify_contract(chain_id: str | None, language: str, status: str, input_shape: str) -> None:
    """Count one verification outcome. Requests without a chain id use an empty label."""
    VERIFY_CONTRACT.labels(chain_id=chain_id or "", language=language, status=status, input=input_shape).inc()
