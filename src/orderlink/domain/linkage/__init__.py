"""Linkage repair layers and the engine that registers them."""

from __future__ import annotations

from orderlink.domain.linkage.backstop import LifecycleBackstop
from orderlink.domain.linkage.engine import (
    BACKSTOP_PRIORITY,
    NORMALIZER_PRIORITY,
    VERIFIER_PRIORITY,
    LinkageEngine,
)
from orderlink.domain.linkage.matcher import OrphanMatcher, PairingSuggestion
from orderlink.domain.linkage.normalizer import RowNormalizer
from orderlink.domain.linkage.pairing import PairingService
from orderlink.domain.linkage.resolver import ReferenceResolver
from orderlink.domain.linkage.results import (
    BackstopReport,
    PairingErrorKind,
    PairingFailure,
    PairingResult,
    PairingSuccess,
    RepairApplied,
    RepairFailed,
    RepairOutcome,
    RepairSkipped,
    RepairStatus,
)
from orderlink.domain.linkage.verifier import PostCreateVerifier

__all__ = [
    "BACKSTOP_PRIORITY",
    "NORMALIZER_PRIORITY",
    "VERIFIER_PRIORITY",
    "BackstopReport",
    "LifecycleBackstop",
    "LinkageEngine",
    "OrphanMatcher",
    "PairingErrorKind",
    "PairingFailure",
    "PairingResult",
    "PairingService",
    "PairingSuccess",
    "PairingSuggestion",
    "PostCreateVerifier",
    "ReferenceResolver",
    "RepairApplied",
    "RepairFailed",
    "RepairOutcome",
    "RepairSkipped",
    "RepairStatus",
    "RowNormalizer",
]
