from .platforms import InvalidPlatformError, PlatformSpec, parse_platform
from .reader import ReaderError, parse_targetfile, walk
from .references import ArtifactRef, InvalidReferenceError, TargetRef, parse_artifact, parse_target
from .statements import Statement, StatementKind
from .templating import ExpansionError, render_template

__all__ = [
    "ArtifactRef",
    "ExpansionError",
    "InvalidPlatformError",
    "InvalidReferenceError",
    "PlatformSpec",
    "ReaderError",
    "Statement",
    "StatementKind",
    "TargetRef",
    "parse_artifact",
    "parse_platform",
    "parse_target",
    "parse_targetfile",
    "render_template",
    "walk",
]
