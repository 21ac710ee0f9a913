import base64
from typing import Annotated, Any, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer


def _from_base64(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    return value


def _to_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


# Raw bytes in Python, standard base64 strings in JSON.
Base64Data = Annotated[
    bytes,
    BeforeValidator(_from_base64),
    PlainSerializer(_to_base64, return_type=str, when_used="json"),
]


class InputFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name, relative to its folder.")
    data: Base64Data = Field(..., description="Raw file content.")
    folder: str = Field(default="", description="Relative sub-folder inside the build workspace (build only).")


class BuildLatexRequest(BaseModel):
    files: List[InputFile] = Field(default_factory=list)


class MergeRequest(BaseModel):
    files: List[InputFile] = Field(default_factory=list, description="Files in the order their pages should appear.")
    force_even: bool = Field(default=False, description="Pad every file to an even page count before merging.")


class FileReply(BaseModel):
    data: Base64Data = b""
    success: bool
    note: str


class HealthReply(BaseModel):
    healthy: bool
