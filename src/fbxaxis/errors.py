"""Exceptions and diagnostics collected during an axis conversion pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AxisConversionError(Exception):
    """Base class for every error raised by fbxaxis."""


class StructuralInconsistencyError(AxisConversionError):
    """The imported data contradicts itself, so one mesh or channel group cannot be converted."""


class MissingBoneDeltaError(StructuralInconsistencyError):
    """A skinned bone has no recorded hierarchy delta (deleted node or root)."""


class BindPoseCountError(StructuralInconsistencyError):
    """A skin references a different number of bones than its mesh has bind poses."""


class ChannelGroupError(StructuralInconsistencyError):
    """A position or rotation channel group is incomplete or has mismatched keyframe counts."""


class UserDataError(AxisConversionError):
    """The serialized per-asset configuration could not be read."""


class DiagnosticKind(Enum):
    """Kinds of problems reported to the import host."""

    STRUCTURAL = "structural"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem.

    Attributes:
        kind: Whether the problem skipped a whole mesh/group or a single unknown binding.
        subject: Name of the mesh, node path or binding concerned.
        message: Human readable description.

    """

    kind: DiagnosticKind
    subject: str
    message: str


@dataclass
class ConversionReport:
    """Diagnostics accumulated by one conversion pass."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the pass finished without any diagnostic."""
        return not self.diagnostics

    def add(self, kind: DiagnosticKind, subject: str, message: str) -> Diagnostic:
        """Record a diagnostic and return it."""
        diagnostic = Diagnostic(kind=kind, subject=subject, message=message)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Return the diagnostics of one kind, in the order they were recorded."""
        return [d for d in self.diagnostics if d.kind is kind]
