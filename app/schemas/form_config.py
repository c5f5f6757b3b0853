"""
JSON schemas for the patient record form configuration.

The configuration is static content owned elsewhere; these schemas pin
down only its shape so a malformed file fails at load time instead of on
a user's keystroke.
"""

TRIGGER_SCHEMA: dict = {
    "type": "object",
    "required": ["targetFieldKey", "effects", "operator"],
    "properties": {
        "targetFieldKey": {"type": "string", "minLength": 1},
        "effects": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "enum": ["enable", "require", "sub-text"]},
        },
        # Unknown operators are tolerated and evaluate as never met.
        "operator": {"type": "string"},
        "answerBoolean": {"type": "boolean"},
        "answerString": {"type": "string"},
        "answerDateTime": {"type": "string"},
        "substituteText": {"type": "string"},
    },
    "additionalProperties": False,
}

FIELD_SCHEMA: dict = {
    "type": "object",
    "required": ["key", "type"],
    "properties": {
        "key": {"type": "string", "minLength": 1},
        "type": {
            "type": "string",
            "enum": ["display", "group", "string", "date", "choice", "boolean", "reference"],
        },
        "label": {"type": "string"},
        "text": {"type": "string"},
        "dataType": {
            "type": "string",
            "enum": ["ZIP", "Phone Number", "SSN", "Email", "DOB"],
        },
        "disabledDisplay": {"type": "string", "enum": ["hidden", "disabled"]},
        "enableBehavior": {"type": "string", "enum": ["any", "all"]},
        "triggers": {"type": "array", "items": TRIGGER_SCHEMA},
        "options": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["label", "value"],
                "properties": {
                    "label": {"type": "string"},
                    "value": {"type": "string"},
                },
            },
        },
    },
    "additionalProperties": False,
}

FIELD_MAP_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": FIELD_SCHEMA,
}

STRING_LIST: dict = {"type": "array", "items": {"type": "string"}}

FORM_SECTION_SCHEMA: dict = {
    "type": "object",
    "required": ["title", "linkId", "items"],
    "properties": {
        "title": {"type": "string"},
        "linkId": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {"type": "array", "minItems": 1, "items": {"type": "string"}},
            ]
        },
        "items": {
            "oneOf": [
                FIELD_MAP_SCHEMA,
                {"type": "array", "minItems": 1, "items": FIELD_MAP_SCHEMA},
            ]
        },
        "hiddenFields": STRING_LIST,
        "requiredFields": {
            "anyOf": [
                STRING_LIST,
                {"type": "array", "items": STRING_LIST},
            ]
        },
        "triggers": {"type": "array", "items": TRIGGER_SCHEMA},
        "enableBehavior": {"type": "string", "enum": ["any", "all"]},
    },
    "additionalProperties": False,
}

FORM_CONFIG_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Patient record form configuration",
    "type": "object",
    "required": ["FormFields"],
    "properties": {
        "FormFields": {
            "type": "object",
            "additionalProperties": FORM_SECTION_SCHEMA,
        },
        "hiddenFormSections": STRING_LIST,
    },
    "additionalProperties": False,
}
