"""
Domain models for API manifests.

A manifest is the declarative description of an HTTP API: where it lives,
how to authenticate, and which actions an agent may call. Manifests are
validated once on load and treated as read-only afterwards.
"""
import re
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from agent_bridge.errors import ManifestError

# Letters/digits separated by single "-" or "_"; never contains "__"
NAME_PATTERN = re.compile(r"^[A-Za-z0-9]+(?:[-_][A-Za-z0-9]+)*$")
PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
ParameterLocation = Literal["query", "path", "header", "body"]
ParameterType = Literal["string", "number", "integer", "boolean", "array", "object"]


def is_valid_name(name: str) -> bool:
    """Check that a plugin or action name is safe to embed in a tool name."""
    return bool(name) and NAME_PATTERN.match(name) is not None


class OAuth2Config(BaseModel):
    """OAuth2 endpoints, kept for display only."""

    authorization_url: str
    token_url: str
    scopes: Dict[str, str] = Field(default_factory=dict)


class ManifestAuth(BaseModel):
    """Authentication scheme of an API."""

    type: Literal["none", "bearer", "api_key", "oauth2"] = "none"
    api_key_header: Optional[str] = None
    oauth2: Optional[OAuth2Config] = None
    instructions: Optional[str] = None

    @model_validator(mode="after")
    def check_scheme_fields(self) -> "ManifestAuth":
        if self.type == "api_key" and not self.api_key_header:
            raise ValueError("api_key auth requires api_key_header")
        if self.type == "oauth2" and self.oauth2 is None:
            raise ValueError("oauth2 auth requires an oauth2 block")
        return self


class ManifestParameter(BaseModel):
    """One declared parameter of an action."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    location: ParameterLocation = Field(..., alias="in")
    required: bool = False
    type: ParameterType = "string"
    default: Any = None
    enum: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Parameter name cannot be empty")
        return v


class ManifestAction(BaseModel):
    """One callable action of an API."""

    id: str
    description: str = ""
    method: HttpMethod
    path: str
    parameters: List[ManifestParameter] = Field(default_factory=list)
    confirm: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("id")
    @classmethod
    def id_is_slug(cls, v: str) -> str:
        if not is_valid_name(v):
            raise ValueError(f"Invalid action id '{v}'")
        return v

    @model_validator(mode="after")
    def check_parameters(self) -> "ManifestAction":
        names = [p.name for p in self.parameters]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Action '{self.id}' declares duplicate parameters: {duplicates}"
            )

        placeholders = set(PLACEHOLDER_PATTERN.findall(self.path))
        path_params = {p.name for p in self.parameters if p.location == "path"}
        missing = placeholders - path_params
        if missing:
            raise ValueError(
                f"Action '{self.id}' path placeholders without path parameters: {sorted(missing)}"
            )
        unused = path_params - placeholders
        if unused:
            raise ValueError(
                f"Action '{self.id}' path parameters not in path: {sorted(unused)}"
            )
        return self

    def get_parameter(self, name: str) -> Optional[ManifestParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


class Manifest(BaseModel):
    """Declarative description of an API."""

    schema_version: str = "1.0"
    name: str
    description: str = ""
    version: str = "0.0.0"
    base_url: str
    auth: Optional[ManifestAuth] = None
    actions: List[ManifestAction] = Field(default_factory=list)
    logo_url: Optional[str] = None
    contact_url: Optional[str] = None
    openapi_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_is_slug(cls, v: str) -> str:
        if not is_valid_name(v):
            raise ValueError(
                f"Invalid manifest name '{v}': use letters and digits separated by single '-' or '_'"
            )
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("base_url cannot be empty")
        return v.rstrip("/")

    @model_validator(mode="after")
    def unique_action_ids(self) -> "Manifest":
        seen = set()
        for action in self.actions:
            if action.id in seen:
                raise ValueError(f"Duplicate action id '{action.id}'")
            seen.add(action.id)
        return self

    def get_action(self, action_id: str) -> Optional[ManifestAction]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def to_document(self) -> Dict[str, Any]:
        """Return the manifest as a JSON-ready document (with ``in`` keys)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def load(cls, source: Union[str, bytes, Dict[str, Any]]) -> "Manifest":
        """Parse and validate a manifest from JSON text or a dict.

        Raises:
            ManifestError: If the document is not valid JSON or fails validation
        """
        try:
            if isinstance(source, (str, bytes)):
                return cls.model_validate_json(source)
            return cls.model_validate(source)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest: {e}") from e

    @classmethod
    def load_file(cls, path: str) -> "Manifest":
        with open(path, "r", encoding="utf-8") as f:
            return cls.load(f.read())
