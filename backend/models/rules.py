"""
Option models for the upload validation rules
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RuleOptions(BaseModel):
    """Options shared by every upload rule"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field: str
    skip_empty: bool = Field(False, alias="skipEmpty")
    required: bool = True
    validate_in_cli: bool = Field(False, alias="validateInCli")
    message: Optional[str] = None


class SizeRuleOptions(RuleOptions):
    """Options for uploadedFileSize: ``in`` is [lower, upper, unit]"""
    in_: List[Any] = Field(default_factory=list, alias="in")


class TypeRuleOptions(RuleOptions):
    """Options for allowedFileType"""
    allowed: List[str] = Field(default_factory=list)


class DimensionsRuleOptions(RuleOptions):
    """Options for dimensions; an omitted side is not checked"""
    width: Optional[int] = None
    height: Optional[int] = None
