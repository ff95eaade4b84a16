"""
Manifest compiler for the Agent Bridge system.

This module turns a declarative manifest plus a credential record into a
live plugin whose actions issue real HTTP requests. Parameter placement
(path, query, header, body) and credential injection follow the manifest
exactly; every failure becomes a failed ActionResult.
"""
import copy
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from agent_bridge.domains.manifest import PLACEHOLDER_PATTERN, Manifest, ManifestAction
from agent_bridge.domains.tools import ActionResult
from agent_bridge.errors import EnrichmentError, ParameterValidationError
from agent_bridge.interfaces.plugins.plugins import Action, ActionContext
from agent_bridge.manifests.enrichment import (
    DEFAULT_ENRICHMENTS,
    EnrichmentHook,
    EnrichmentTable,
    RequestDraft,
    Send,
    get_enrichment,
)
from agent_bridge.manifests.schema import (
    build_parameter_model,
    build_parameter_schema,
    validate_parameters,
)
from agent_bridge.manifests.summarize import summarize_error, summarize_response
from agent_bridge.plugins.base import ActionPlugin

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def stringify(value: Any) -> str:
    """Render a parameter value for a URL or header."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_auth_headers(
    manifest: Manifest, credentials: Optional[Dict[str, Any]]
) -> Dict[str, str]:
    """Headers that authenticate a request, per the manifest's auth scheme."""
    if not credentials or manifest.auth is None:
        return {}

    auth = manifest.auth
    if auth.type == "bearer":
        token = credentials.get("token")
        return {"Authorization": f"Bearer {token}"} if token else {}

    if auth.type == "api_key":
        key = credentials.get("api_key") or credentials.get("token") or ""
        return {auth.api_key_header: str(key)}

    if auth.type == "oauth2":
        oauth = credentials.get("oauth")
        nested = oauth.get("access_token") if isinstance(oauth, dict) else None
        access_token = nested or credentials.get("access_token") or credentials.get("token")
        return {"Authorization": f"Bearer {access_token}"} if access_token else {}

    return {}


class CompiledAction(Action):
    """A manifest action bound to its manifest, credentials and transport."""

    def __init__(
        self,
        action: ManifestAction,
        manifest: Manifest,
        send: Send,
        credentials: Optional[Dict[str, Any]] = None,
        enrichment: Optional[EnrichmentHook] = None,
    ):
        self._action = action
        self._manifest = manifest
        self._send = send
        self._credentials = credentials
        self._enrichment = enrichment
        self._schema = build_parameter_schema(action.parameters)
        self._model = build_parameter_model(
            f"{manifest.name}_{action.id}_params".replace("-", "_"), action.parameters
        )

    @property
    def name(self) -> str:
        return self._action.id

    @property
    def description(self) -> str:
        return self._action.description

    @property
    def confirm(self) -> bool:
        return self._action.confirm

    @property
    def declaration(self) -> ManifestAction:
        return self._action

    def get_schema(self) -> Dict[str, Any]:
        return copy.deepcopy(self._schema)

    def validate(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return validate_parameters(self._model, params)

    async def execute(
        self, params: Dict[str, Any], context: Optional[ActionContext] = None
    ) -> ActionResult:
        try:
            return await self._call(dict(params or {}))
        except EnrichmentError as e:
            return ActionResult.failure(str(e), e.data)
        except ParameterValidationError as e:
            return ActionResult.failure(f"Invalid parameters: {e}")
        except httpx.HTTPError as e:
            logger.warning(
                f"Request for {self._manifest.name}.{self.name} failed: {e!r}"
            )
            return ActionResult.failure(f"Request failed: {str(e) or type(e).__name__}")
        except Exception as e:
            logger.exception(f"Unexpected error in {self._manifest.name}.{self.name}: {e}")
            return ActionResult.failure(f"Request failed: {e}")

    def build_request(self, draft: RequestDraft) -> httpx.Request:
        """Route validated parameters into an HTTP request."""
        action = self._action
        path = action.path
        query: List[tuple] = []

        for param in action.parameters:
            value = draft.params.get(param.name)
            if value is None:
                continue
            if param.location == "path":
                path = path.replace(f"{{{param.name}}}", quote(stringify(value), safe=""))
            elif param.location == "query":
                query.append((param.name, stringify(value)))
            elif param.location == "header":
                draft.headers[param.name] = stringify(value)
            elif param.location == "body":
                draft.body[param.name] = value

        unresolved = PLACEHOLDER_PATTERN.findall(path)
        if unresolved:
            raise ParameterValidationError(
                [f"{name}: Field required" for name in unresolved]
            )

        if self._enrichment is not None:
            self._enrichment.before_send(draft)

        content = None
        if action.method in BODY_METHODS and draft.body:
            content = json.dumps(draft.body).encode("utf-8")
            draft.headers["Content-Type"] = "application/json"

        return httpx.Request(
            action.method,
            f"{self._manifest.base_url}{path}",
            params=query or None,
            headers=draft.headers,
            content=content,
        )

    async def _call(self, params: Dict[str, Any]) -> ActionResult:
        headers = {"Accept": "application/json"}
        headers.update(build_auth_headers(self._manifest, self._credentials))
        draft = RequestDraft(
            manifest=self._manifest,
            action=self._action,
            params=params,
            send=self._send,
            headers=headers,
        )

        if self._enrichment is not None:
            await self._enrichment.before_routing(draft)

        request = self.build_request(draft)
        logger.debug(f"{self._manifest.name}.{self.name}: {request.method} {request.url}")
        response = await self._send(request)

        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = response.text
        else:
            data = None

        if not response.is_success:
            return ActionResult.failure(summarize_error(response.status_code, data), data)

        return ActionResult(
            success=True, message=summarize_response(data, self.name), data=data
        )


class ActionCompiler:
    """Compiles manifests into plugins that share one HTTP transport."""

    def __init__(
        self,
        send: Optional[Send] = None,
        timeout: float = DEFAULT_TIMEOUT,
        enrichments: Optional[EnrichmentTable] = None,
    ):
        """Initialize the compiler.

        Args:
            send: Optional coroutine that sends an ``httpx.Request``; replaces
                the default client, e.g. for testing or proxying
            timeout: Timeout in seconds for the default client
            enrichments: Enrichment table, defaults to DEFAULT_ENRICHMENTS
        """
        self._custom_send = send
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self.enrichments = DEFAULT_ENRICHMENTS if enrichments is None else enrichments

    async def send(self, request: httpx.Request) -> httpx.Response:
        if self._custom_send is not None:
            return await self._custom_send(request)
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout), follow_redirects=True
            )
        return await self._client.send(request)

    def compile(
        self, manifest: Manifest, credentials: Optional[Dict[str, Any]] = None
    ) -> ActionPlugin:
        """Compile a manifest into a plugin.

        The credential record is copied so later changes by the caller, or
        by an action, never leak into compiled actions.
        """
        creds = copy.deepcopy(credentials) if credentials else None
        frozen = manifest.model_copy(deep=True)
        actions = [
            CompiledAction(
                action=action,
                manifest=frozen,
                send=self.send,
                credentials=creds,
                enrichment=get_enrichment(self.enrichments, frozen.name, action.id),
            )
            for action in frozen.actions
        ]
        logger.info(f"Compiled manifest {frozen.name} with {len(actions)} actions")
        return ActionPlugin(
            name=frozen.name,
            description=frozen.description,
            version=frozen.version,
            actions=actions,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
