"""
Upload-related Pydantic models
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class UploadError(IntEnum):
    """Per-file upload status codes, numbered as the web platform reports them"""
    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadDescriptor(BaseModel):
    """What was received for one file field of a form submission"""
    model_config = ConfigDict(frozen=True)

    error: UploadError = UploadError.OK
    size: int = 0
    type: str = ""
    tmp_path: str = ""
    name: str = ""


# Field name -> descriptor; None (or a missing key) means nothing was sent
UploadTable = Mapping[str, Optional[UploadDescriptor]]


@dataclass(frozen=True)
class UploadContext:
    """Upload state handed to every rule call"""
    uploads: UploadTable = field(default_factory=dict)
    cli: bool = False

    def descriptor(self, name: str) -> Optional[UploadDescriptor]:
        return self.uploads.get(name)


class UploadedFileInfo(BaseModel):
    """Summary of one staged file in an API response"""
    field: str
    filename: str
    size: int
    content_type: str
    status: str


class UploadValidationResponse(BaseModel):
    """Response model for validating a submission against a rule set"""
    rule_set: str
    valid: bool
    files: List[UploadedFileInfo] = []
    errors: Dict[str, List[str]] = {}


class RuleSetInfo(BaseModel):
    """Public description of a rule set"""
    name: str
    description: str
    fields: Dict[str, List[Dict[str, Any]]]
