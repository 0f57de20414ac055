"""Interface extraction, method policy, endpoint modelling and merging."""

from .builder import ModelBuilder
from .extractor import InterfaceExtractor
from .merger import ArtifactMerger, GoRenderer
from .policy import MethodPolicyFilter, PolicyResult, Rejection

__all__ = [
    "ArtifactMerger",
    "GoRenderer",
    "InterfaceExtractor",
    "MethodPolicyFilter",
    "ModelBuilder",
    "PolicyResult",
    "Rejection",
]
