"""
Upload validation endpoints
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from core.context import is_cli
from models.upload import (
    RuleSetInfo,
    UploadContext,
    UploadError,
    UploadedFileInfo,
    UploadValidationResponse,
)
from services.rule_sets import get_rule_set, get_all_rule_sets
from services.uploads import upload_service
from services.validator import validator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/rules", response_model=List[str])
async def list_rules():
    """Names of the registered validation rules"""
    return validator.rules()


@router.get("/rule-sets", response_model=List[RuleSetInfo])
async def list_rule_sets():
    """Available rule sets with their field declarations"""
    return [
        RuleSetInfo(name=rule_set.name, description=rule_set.description, fields=rule_set.fields)
        for rule_set in get_all_rule_sets().values()
    ]


@router.post("/{rule_set_name}", response_model=UploadValidationResponse)
async def validate_upload(rule_set_name: str, request: Request):
    """
    Validate a multipart submission against a rule set.

    - Stages the uploaded files in the temp directory
    - Runs every rule declared for the set
    - Removes the staged files again
    - Returns 422 with per-field messages when a rule fails
    """
    rule_set = get_rule_set(rule_set_name)
    if rule_set is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown rule set '{rule_set_name}'"
        )

    form = await request.form()
    uploads = {}
    try:
        uploads = await upload_service.stage(form)
        context = UploadContext(uploads=uploads, cli=is_cli())
        values: Dict[str, object] = {name: form.get(name) for name in form.keys()}
        errors = validator.check(values, rule_set.fields, context)
    finally:
        await upload_service.cleanup(uploads)
        await form.close()

    files = [
        UploadedFileInfo(
            field=name,
            filename=descriptor.name,
            size=descriptor.size,
            content_type=descriptor.type,
            status=UploadError(descriptor.error).name.lower()
        )
        for name, descriptor in uploads.items()
    ]
    response = UploadValidationResponse(
        rule_set=rule_set.name,
        valid=not errors,
        files=files,
        errors=errors
    )

    if errors:
        logger.info(f"Upload rejected by rule set '{rule_set.name}': {sorted(errors)}")
        return JSONResponse(status_code=422, content=response.model_dump())

    return response
