"""Prompt template rendering."""

import json
import re
from collections.abc import Mapping
from typing import Any, Dict

from pydantic import BaseModel

PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}", re.ASCII)


def render_template(template: str, params: Any) -> str:
    """
    Replace every ``{{identifier}}`` with the matching field of ``params``.

    Placeholders without a matching field stay verbatim, as do optional model
    fields the caller never set. Non-mapping params (None, strings, numbers)
    render the template unchanged.
    """
    if isinstance(params, BaseModel):
        params = _model_params(params)
    if not isinstance(params, Mapping):
        return template

    def _substitute(match: re.Match) -> str:
        key = match.group(1)
        if key not in params:
            return match.group(0)
        return format_value(params[key])

    return PLACEHOLDER.sub(_substitute, template)


def format_value(value: Any) -> str:
    """Render JSON scalars the way they appear on the wire (``true``, ``null``)."""
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def _model_params(model: BaseModel) -> Dict[str, Any]:
    unset = type(model).model_fields.keys() - model.model_fields_set
    return {
        key: value
        for key, value in model.model_dump().items()
        if not (key in unset and value is None)
    }
