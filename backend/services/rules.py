"""
Upload validation rules.

Each rule is a plain predicate with the registry calling convention
``rule(value, rule_name, options, context) -> bool``. A ``False`` return is a
validation failure that ends up as a form message; a malformed declaration
raises ``ConfigurationError`` instead.

A field that is absent from the upload table means the user did not intend to
change it, so the rules let it through.
"""

import logging
from typing import Any

from models.rules import RuleOptions, SizeRuleOptions, TypeRuleOptions, DimensionsRuleOptions
from models.upload import UploadContext, UploadError
from utils.error_handlers import ValidationError
from utils.validators import is_in_list, is_in_range, parse_size_range, read_image_size

logger = logging.getLogger(__name__)


def _skip_check(rule: str, options: RuleOptions, context: UploadContext) -> bool:
    """Short-circuits shared by the presence, size and type rules"""
    if options.skip_empty or not options.required:
        return True

    if context.cli and not options.validate_in_cli:
        logger.debug(f"{rule}: skipping '{options.field}' outside of a request")
        return True

    return context.descriptor(options.field) is None


def is_uploaded_file(value: Any, rule: str, options: RuleOptions, context: UploadContext) -> bool:
    """
    Check that a file was uploaded for the field.

    Any upload error other than NO_FILE still counts as present; the other
    rules reject broken uploads.
    """
    if _skip_check(rule, options, context):
        return True

    return context.descriptor(options.field).error != UploadError.NO_FILE


def uploaded_file_size(value: Any, rule: str, options: SizeRuleOptions, context: UploadContext) -> bool:
    """
    Check that the uploaded size lies within ``in``, e.g. ``[0, 2, 'mb']``.

    Raises:
        ConfigurationError: If ``in`` lacks a bound or names an unknown unit
    """
    lower, upper = parse_size_range(options.in_)

    if _skip_check(rule, options, context):
        return True

    uploaded = context.descriptor(options.field)
    return is_in_range(uploaded.size, lower, upper)


def allowed_file_type(value: Any, rule: str, options: TypeRuleOptions, context: UploadContext) -> bool:
    """Check that the uploaded MIME type is one of ``allowed``."""
    if _skip_check(rule, options, context):
        return True

    uploaded = context.descriptor(options.field)
    return is_in_list(uploaded.type, options.allowed)


def dimensions(value: Any, rule: str, options: DimensionsRuleOptions, context: UploadContext) -> bool:
    """
    Check image width and height. Either side is only checked when set.

    Unlike the other rules, ``required`` is checked first and fails as soon
    as there is no staged file. A file that cannot be decoded as an image
    fails validation.
    """
    uploaded = context.descriptor(options.field)
    tmp_path = uploaded.tmp_path if uploaded is not None else ""

    if options.required and not tmp_path:
        return False

    if options.skip_empty and not tmp_path:
        return True

    if context.cli and not options.validate_in_cli:
        logger.debug(f"{rule}: skipping '{options.field}' outside of a request")
        return True

    if uploaded is None:
        return True

    try:
        width, height = read_image_size(tmp_path)
    except ValidationError as e:
        logger.warning(f"{rule}: '{options.field}' is not a readable image: {e.message}")
        return False

    if options.width is not None and width != options.width:
        return False

    if options.height is not None and height != options.height:
        return False

    return True
