"""Monitor Health - scoring and check evaluation for report service monitors. Pure, no IO.

Invariants:
    - Score starts at 100 and only the worst band per signal is deducted
    - ≥ 80 HEALTHY, ≥ 60 DEGRADED, otherwise UNHEALTHY
    - Resource checks pass below 90% usage, and pass when no reading has been reported
    - Unknown signals (None) deduct nothing
"""

from enum import Enum


class HealthStatus(str, Enum):
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"
    UNKNOWN = "UNKNOWN"


class HealthCheckType(str, Enum):
    LIVENESS = "LIVENESS"
    READINESS = "READINESS"
    DATABASE = "DATABASE"
    CACHE = "CACHE"
    DISK = "DISK"
    MEMORY = "MEMORY"
    CPU = "CPU"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    CUSTOM = "CUSTOM"


RESOURCE_LIMIT = 90.0
_CONNECTED = {"CONNECTED", "HEALTHY"}
_SERVICE_UP = {"HEALTHY", "UP"}

# (limit, penalty) pairs, most severe first
_USAGE_BANDS = ((90, 30), (80, 20), (70, 10))
_ERROR_RATE_BANDS = ((10, 30), (5, 20), (2, 10))
_RESPONSE_BANDS = ((5000, 20), (2000, 10), (1000, 5))
_CHECK_SUCCESS_BANDS = ((70, 30), (85, 20), (95, 10))


def _above(value: float | None, bands) -> int:
    if value is None:
        return 0
    for limit, penalty in bands:
        if value > limit:
            return penalty
    return 0


def _below(value: float | None, bands) -> int:
    if value is None:
        return 0
    for limit, penalty in bands:
        if value < limit:
            return penalty
    return 0


def health_score(
    cpu_usage: float | None = None,
    memory_usage: float | None = None,
    error_rate: float | None = None,
    avg_response_time_ms: float | None = None,
    check_success_rate: float | None = None,
) -> int:
    score = 100
    score -= _above(cpu_usage, _USAGE_BANDS)
    score -= _above(memory_usage, _USAGE_BANDS)
    score -= _above(error_rate, _ERROR_RATE_BANDS)
    score -= _above(avg_response_time_ms, _RESPONSE_BANDS)
    score -= _below(check_success_rate, _CHECK_SUCCESS_BANDS)
    return max(score, 0)


def status_for_score(score: int) -> HealthStatus:
    if score >= 80:
        return HealthStatus.HEALTHY
    if score >= 60:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


def evaluate_check(check_type: HealthCheckType, readings: dict) -> bool:
    """Evaluate one check against a monitor's current readings."""
    if check_type == HealthCheckType.LIVENESS:
        return readings.get("started_at") is not None
    if check_type == HealthCheckType.READINESS:
        return (
            readings.get("status") == HealthStatus.HEALTHY.value
            and all(
                s.upper() in _SERVICE_UP
                for s in (readings.get("external_services") or {}).values()
            )
        )
    if check_type == HealthCheckType.DATABASE:
        return (readings.get("database_status") or "").upper() in _CONNECTED
    if check_type == HealthCheckType.CACHE:
        return (readings.get("cache_status") or "").upper() in _CONNECTED
    if check_type in (HealthCheckType.DISK, HealthCheckType.MEMORY, HealthCheckType.CPU):
        key = {
            HealthCheckType.DISK: "disk_usage",
            HealthCheckType.MEMORY: "memory_usage",
            HealthCheckType.CPU: "cpu_usage",
        }[check_type]
        usage = readings.get(key)
        return usage is None or usage < RESOURCE_LIMIT
    if check_type == HealthCheckType.EXTERNAL_SERVICE:
        return all(
            s.upper() in _SERVICE_UP for s in (readings.get("external_services") or {}).values()
        )
    return True
