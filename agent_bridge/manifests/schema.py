"""
Parameter schemas for manifest actions.

Each action gets two views of its declared parameters, both derived once
at compile time: a JSON schema for the model and a pydantic model used to
validate tool call arguments.
"""
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from agent_bridge.domains.manifest import ManifestParameter
from agent_bridge.errors import ParameterValidationError
from agent_bridge.plugins.schema import ARRAY_ITEMS_PLACEHOLDER

_JSON_TYPES = {
    "string": "string",
    "number": "number",
    "integer": "integer",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}


def parameter_to_json_schema(param: ManifestParameter) -> Dict[str, Any]:
    """Project one declared parameter into a JSON schema node."""
    schema: Dict[str, Any] = {"type": _JSON_TYPES[param.type]}
    if param.type == "array":
        schema["items"] = dict(ARRAY_ITEMS_PLACEHOLDER)
    elif param.type == "object":
        schema["additionalProperties"] = True
    elif param.type == "string" and param.enum:
        schema["enum"] = list(param.enum)
    if param.description:
        schema["description"] = param.description
    if param.default is not None:
        schema["default"] = param.default
    return schema


def build_parameter_schema(parameters: List[ManifestParameter]) -> Dict[str, Any]:
    """Build the ``type: object`` schema for an action's parameters."""
    properties = {p.name: parameter_to_json_schema(p) for p in parameters}
    required = [p.name for p in parameters if p.required and p.default is None]

    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _python_type(param: ManifestParameter) -> Any:
    if param.type == "number":
        return Union[int, float]
    if param.type == "integer":
        return int
    if param.type == "boolean":
        return bool
    if param.type == "array":
        return List[Any]
    if param.type == "object":
        return Dict[str, Any]
    if param.enum:
        return Literal[tuple(param.enum)]
    return str


def build_parameter_model(
    model_name: str, parameters: List[ManifestParameter]
) -> Type[BaseModel]:
    """Create the pydantic model that validates an action's arguments.

    Fields are keyed by position and aliased to the declared name, so
    parameter names that are not Python identifiers (``X-Request-Id``,
    ``from``) still validate.
    """
    fields: Dict[str, Tuple[Any, Any]] = {}
    for index, param in enumerate(parameters):
        annotation = _python_type(param)
        if param.required and param.default is None:
            fields[f"p{index}"] = (annotation, Field(..., alias=param.name))
        else:
            fields[f"p{index}"] = (
                Optional[annotation],
                Field(param.default, alias=param.name),
            )

    return create_model(
        model_name,
        __config__=ConfigDict(coerce_numbers_to_str=True, extra="ignore"),
        **fields,
    )


def format_validation_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return messages


def validate_parameters(
    model: Type[BaseModel], params: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """Validate raw arguments, returning declared names with defaults applied.

    Raises:
        ParameterValidationError: With one message per failing field
    """
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ParameterValidationError(
            [f"Expected an object of parameters, got {type(params).__name__}"]
        )
    try:
        validated = model.model_validate(params)
    except ValidationError as e:
        raise ParameterValidationError(format_validation_errors(e)) from e
    return validated.model_dump(by_alias=True, exclude_none=True)
