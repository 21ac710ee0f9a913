from .builder import BuildLatexRequest, FileReply, HealthReply, InputFile, MergeRequest

__all__ = [
    "BuildLatexRequest",
    "FileReply",
    "HealthReply",
    "InputFile",
    "MergeRequest",
]
