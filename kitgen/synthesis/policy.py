"""Selects which interface methods become endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..errors import EmptyMethodSetError
from ..logging import get_logger
from ..models import Interface, Method

PRIVATE = "private"
NO_RESULTS = "no-results"
NO_CONTEXT = "no-context"

_MESSAGES = {
    PRIVATE: "The method '%s' is private and will be ignored",
    NO_RESULTS: "The method '%s' does not have any return value and will be ignored",
}


@dataclass(frozen=True)
class Rejection:
    """A method excluded from generation, and why."""

    method: str
    reason: str


@dataclass
class PolicyResult:
    accepted: List[Method] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)


class MethodPolicyFilter:
    """Applies the exported / has-results / takes-a-context rules in that order.

    A method without a context parameter is always warned about; whether it is
    dropped is governed by ``require_context`` so every caller sees one policy.
    """

    def __init__(self, context_type: str = "context.Context", *, require_context: bool = True) -> None:
        self.context_type = context_type
        self.require_context = require_context
        self.logger = get_logger("policy")

    def apply(self, interface: Interface) -> PolicyResult:
        result = PolicyResult()
        for method in interface.methods:
            reason = self._rejection_reason(method)
            if reason is None:
                result.accepted.append(method)
                continue
            result.rejected.append(Rejection(method=method.name, reason=reason))

        if not result.accepted:
            raise EmptyMethodSetError(
                f"The interface {interface.name} has no usable method; implement the interface methods first"
            )
        return result

    def has_context(self, method: Method) -> bool:
        return any(param.type == self.context_type for param in method.parameters)

    def _rejection_reason(self, method: Method) -> str | None:
        if not method.name[:1].isupper():
            self.logger.warning(_MESSAGES[PRIVATE], method.name)
            return PRIVATE
        if not method.results:
            self.logger.warning(_MESSAGES[NO_RESULTS], method.name)
            return NO_RESULTS
        if not self.has_context(method):
            if self.require_context:
                self.logger.warning("The method '%s' does not have a context and will be ignored", method.name)
                return NO_CONTEXT
            self.logger.warning(
                "The method '%s' does not have a context; generated calls will use context.Background()",
                method.name,
            )
        return None


__all__ = ["MethodPolicyFilter", "NO_CONTEXT", "NO_RESULTS", "PRIVATE", "PolicyResult", "Rejection"]
