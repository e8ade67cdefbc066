"""
errors.py

[역할]
- approach 계산 중 발생하는 실패 종류를 예외 계층으로 정의한다.
- 내부 컴포넌트는 예외를 raise하고, ApproachPlanner.prepend_approach가 이를 잡아
  ApproachResult(ok=False, error=...)로 변환한다. (경계 밖으로는 예외를 던지지 않음)
- 예외: ConfigurationError는 생성 시점에 그대로 전파된다(초기화 중단).
"""

from enum import Enum


class ErrorKind(Enum):
    CONFIGURATION_ERROR = "configuration_error"
    DIMENSION_MISMATCH = "dimension_mismatch"
    PLANNING_DISABLED = "planning_disabled"
    NO_ELIGIBLE_GROUP = "no_eligible_group"
    PLANNING_FAILURE = "planning_failure"
    TARGET_REJECTED = "target_rejected"


class ApproachError(RuntimeError):
    kind = None

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class ConfigurationError(ApproachError):
    kind = ErrorKind.CONFIGURATION_ERROR


class DimensionMismatch(ApproachError):
    kind = ErrorKind.DIMENSION_MISMATCH


class PlanningDisabled(ApproachError):
    kind = ErrorKind.PLANNING_DISABLED


class NoEligibleGroup(ApproachError):
    kind = ErrorKind.NO_ELIGIBLE_GROUP


class PlanningFailure(ApproachError):
    kind = ErrorKind.PLANNING_FAILURE


class TargetRejected(ApproachError):
    kind = ErrorKind.TARGET_REJECTED
