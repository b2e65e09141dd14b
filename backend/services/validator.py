"""
Validator registry.

Rules are registered under a name together with the pydantic model their
options are coerced into. ``check`` runs ``$validates``-style declarations,
a mapping of field name to a list of rule declarations, against a
submission:

    {
        "avatar": [
            {"rule": "isUploadedFile", "message": "You must upload a file."},
            {"rule": "uploadedFileSize", "in": [0, 2, "mb"]},
        ]
    }
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from pydantic import ValidationError as PydanticValidationError

from core.context import is_cli
from models.rules import RuleOptions, SizeRuleOptions, TypeRuleOptions, DimensionsRuleOptions
from models.upload import UploadContext
from services import rules
from utils.error_handlers import ConfigurationError

logger = logging.getLogger(__name__)

RuleFunc = Callable[[Any, str, RuleOptions, UploadContext], bool]
Declaration = Union[str, Mapping[str, Any]]


@dataclass(frozen=True)
class RegisteredRule:
    """A rule callable and the options model it expects"""
    name: str
    func: RuleFunc
    options_model: Type[RuleOptions]


class Validator:
    """Registry of named validation rules"""

    def __init__(self):
        self._rules: Dict[str, RegisteredRule] = {}

    def add(self, name: str, func: RuleFunc, options_model: Type[RuleOptions] = RuleOptions) -> None:
        """Register a rule under a name, replacing any rule already there"""
        if name in self._rules:
            logger.info(f"Replacing validation rule '{name}'")
        self._rules[name] = RegisteredRule(name=name, func=func, options_model=options_model)

    def has(self, name: str) -> bool:
        return name in self._rules

    def rules(self) -> List[str]:
        return sorted(self._rules)

    def get(self, name: str) -> RegisteredRule:
        try:
            return self._rules[name]
        except KeyError:
            raise ConfigurationError(
                f"Validation rule `{name}` is not defined.",
                details={"rule": name, "available": self.rules()}
            )

    def options_for(self, name: str, options: Union[RuleOptions, Mapping[str, Any]]) -> RuleOptions:
        """
        Coerce raw options into the model registered for a rule.

        Raises:
            ConfigurationError: If the rule is unknown or the options do not fit its model
        """
        registered = self.get(name)
        if isinstance(options, registered.options_model):
            return options
        if isinstance(options, RuleOptions):
            options = options.model_dump(by_alias=True)
        try:
            return registered.options_model.model_validate(dict(options))
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid options for validation rule `{name}`: {e.error_count()} error(s)",
                details={"rule": name, "errors": e.errors(include_url=False)}
            )

    def rule(
        self,
        name: str,
        value: Any,
        options: Union[RuleOptions, Mapping[str, Any]],
        context: Optional[UploadContext] = None
    ) -> bool:
        """
        Run a single rule.

        Args:
            name: Registered rule name
            value: Submitted value of the field
            options: Rule options, ``field`` included
            context: Upload state; defaults to an empty table in the current
                execution context

        Returns:
            True if the value passes the rule
        """
        registered = self.get(name)
        parsed = self.options_for(name, options)
        if context is None:
            context = UploadContext(uploads={}, cli=is_cli())
        return bool(registered.func(value, name, parsed, context))

    def check(
        self,
        values: Mapping[str, Any],
        declarations: Mapping[str, List[Declaration]],
        context: Optional[UploadContext] = None
    ) -> Dict[str, List[str]]:
        """
        Run rule declarations for every field.

        Args:
            values: Submitted form values
            declarations: Field name -> list of rule declarations
            context: Upload state shared by all rules of this submission

        Returns:
            Field name -> failure messages, only for fields that failed
        """
        if context is None:
            context = UploadContext(uploads={}, cli=is_cli())

        errors: Dict[str, List[str]] = {}
        for field_name, field_rules in declarations.items():
            value = values.get(field_name)
            for declaration in field_rules:
                if isinstance(declaration, str):
                    declaration = {"rule": declaration}
                options = dict(declaration)
                name = options.pop("rule", None)
                if not name:
                    raise ConfigurationError(
                        f"Rule declaration for `{field_name}` has no rule name.",
                        details={"field": field_name, "declaration": dict(declaration)}
                    )
                options["field"] = field_name

                if not self.rule(name, value, options, context):
                    message = options.get("message") or f"Invalid value for {field_name}."
                    logger.debug(f"Rule '{name}' failed for '{field_name}'")
                    errors.setdefault(field_name, []).append(message)

        return errors


def create_validator() -> Validator:
    """Validator with the upload rules registered"""
    registry = Validator()
    registry.add("isUploadedFile", rules.is_uploaded_file, RuleOptions)
    registry.add("uploadedFileSize", rules.uploaded_file_size, SizeRuleOptions)
    registry.add("allowedFileType", rules.allowed_file_type, TypeRuleOptions)
    registry.add("dimensions", rules.dimensions, DimensionsRuleOptions)
    return registry


validator = create_validator()
