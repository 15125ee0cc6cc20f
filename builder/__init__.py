from .base import BuildCancelled, BuildContext, GraphBuilder
from .directives import ImageLoadDirective, ImagePullDirective, WithDockerOptions
from .recording import PlanStep, RecordingBuilder

__all__ = [
    "BuildCancelled",
    "BuildContext",
    "GraphBuilder",
    "ImageLoadDirective",
    "ImagePullDirective",
    "PlanStep",
    "RecordingBuilder",
    "WithDockerOptions",
]
