"""
Named upload rule sets.
Each rule set maps form fields to the rule declarations run against them.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from services.validator import Validator
from utils.error_handlers import ConfigurationError
from utils.validators import parse_size_range

IMAGE_TYPES = [
    'image/png',
    'image/x-png',
    'image/jpeg',
    'image/pjpeg',
]


@dataclass
class RuleSet:
    """A named set of rule declarations for an upload form."""
    name: str
    description: str
    fields: Dict[str, List[Dict[str, Any]]]

    def rule_names(self) -> List[str]:
        """Every rule name referenced by the set."""
        return [
            declaration.get('rule', '')
            for declarations in self.fields.values()
            for declaration in declarations
        ]

    def validate(self, validator: Validator) -> bool:
        """
        Check the declarations against a validator.

        Raises:
            ConfigurationError: If a rule is unknown or a size range is malformed
        """
        for field_name, declarations in self.fields.items():
            for declaration in declarations:
                name = declaration.get('rule')
                if not name or not validator.has(name):
                    raise ConfigurationError(
                        f"Rule set `{self.name}` uses unknown rule `{name}` on `{field_name}`.",
                        details={"rule_set": self.name, "field": field_name, "rule": name}
                    )
                if 'in' in declaration:
                    parse_size_range(declaration['in'])
                validator.options_for(name, {**declaration, 'field': field_name})
        return True


RULE_SETS: Dict[str, RuleSet] = {
    'avatar': RuleSet(
        name='avatar',
        description='Square 45x45 profile picture, PNG or JPEG, up to 2MB',
        fields={
            'avatar': [
                {'rule': 'isUploadedFile', 'message': 'You must upload a file.'},
                {'rule': 'uploadedFileSize', 'in': [0, 2, 'mb'],
                 'message': 'The image must be less than 2mb.'},
                {'rule': 'allowedFileType', 'allowed': IMAGE_TYPES,
                 'message': 'Please upload a JPG or PNG image.'},
                {'rule': 'dimensions', 'width': 45, 'height': 45,
                 'message': 'The image dimensions must be 45 x 45'},
            ],
        },
    ),
    'banner': RuleSet(
        name='banner',
        description=(
            '728px wide leaderboard banner. Leave the field out of the form to keep '
            'the current one; an empty file input is rejected like any other bad upload'
        ),
        fields={
            'banner': [
                {'rule': 'uploadedFileSize', 'in': [1, 512, 'KB'],
                 'message': 'The banner must be between 1kb and 512kb.'},
                {'rule': 'allowedFileType', 'allowed': IMAGE_TYPES + ['image/gif'],
                 'message': 'Please upload a JPG, PNG or GIF image.'},
                {'rule': 'dimensions', 'width': 728, 'required': False, 'skipEmpty': True,
                 'message': 'The banner must be 728 pixels wide.'},
            ],
        },
    ),
    'document': RuleSet(
        name='document',
        description='PDF document up to 10MB',
        fields={
            'document': [
                {'rule': 'isUploadedFile', 'message': 'You must upload a document.'},
                {'rule': 'uploadedFileSize', 'in': [0, 10, 'megabytes'],
                 'message': 'The document must be smaller than 10mb.'},
                {'rule': 'allowedFileType', 'allowed': ['application/pdf'],
                 'message': 'Please upload a PDF document.'},
            ],
        },
    ),
}


def get_rule_set(name: str) -> Optional[RuleSet]:
    """Get a rule set by name."""
    return RULE_SETS.get(name)


def get_all_rule_sets() -> Dict[str, RuleSet]:
    """Get all available rule sets."""
    return RULE_SETS.copy()


def validate_all_rule_sets(validator: Validator) -> bool:
    """Validate every rule set against the registry; raises on the first bad one."""
    for rule_set in RULE_SETS.values():
        rule_set.validate(validator)
    return True
