"""
Per-API enrichment hooks.

Some APIs need a little help that a declarative manifest cannot express:
looking up the caller's own user id, or packing friendly fields into an
encoded envelope. Hooks are registered explicitly by
``(manifest_name, action_id)`` and run inside the compiled action before
the request is sent. A hook that cannot proceed raises EnrichmentError
instead of guessing.
"""
import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.policy import SMTP
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from agent_bridge.domains.manifest import Manifest, ManifestAction
from agent_bridge.errors import EnrichmentError

# Setup logger for this module
logger = logging.getLogger(__name__)

Send = Callable[[httpx.Request], Awaitable[httpx.Response]]

_BASE64URL_PATTERN = re.compile(r"^[A-Za-z0-9+/_-]+=*$")


@dataclass
class RequestDraft:
    """Mutable state of one action call while its request is being built."""

    manifest: Manifest
    action: ManifestAction
    params: Dict[str, Any]
    send: Send
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)


class EnrichmentHook:
    """Base class for enrichment hooks; both stages default to no-ops."""

    async def before_routing(self, draft: RequestDraft) -> None:
        """Adjust ``draft.params`` before they are split into path/query/header/body."""
        return None

    def before_send(self, draft: RequestDraft) -> None:
        """Adjust ``draft.body`` after routing, before serialization."""
        return None


class CurrentUserIdEnrichment(EnrichmentHook):
    """Fill a user id path parameter from the API's "who am I" endpoint."""

    PLACEHOLDERS = {"", "user_id", "current_user", "me", "self"}

    def __init__(self, param: str = "user_id", lookup_path: str = "/me", id_field: str = "id"):
        self.param = param
        self.lookup_path = lookup_path
        self.id_field = id_field

    def _is_placeholder(self, value: Any) -> bool:
        raw = str(value if value is not None else "").strip()
        return raw.lower() in self.PLACEHOLDERS or raw.startswith("<")

    async def before_routing(self, draft: RequestDraft) -> None:
        if not self._is_placeholder(draft.params.get(self.param)):
            return

        headers = {"Accept": "application/json"}
        if "Authorization" in draft.headers:
            headers["Authorization"] = draft.headers["Authorization"]
        request = httpx.Request(
            "GET", f"{draft.manifest.base_url}{self.lookup_path}", headers=headers
        )
        response = await draft.send(request)

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = response.text

        user_id = payload.get(self.id_field) if isinstance(payload, dict) else None
        if not response.is_success or not user_id:
            detail = payload if payload is not None else {"status": response.status_code}
            raise EnrichmentError(
                f"Unable to resolve {draft.manifest.name} {self.param} automatically: {str(detail)[:200]}",
                data={"response": detail},
            )

        logger.debug(f"Resolved {self.param} for {draft.manifest.name}.{draft.action.id}")
        draft.params[self.param] = user_id


def to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _looks_base64url(value: str) -> bool:
    if len(value) <= 20 or "\n" in value or "\r" in value:
        return False
    if not _BASE64URL_PATTERN.match(value):
        return False
    try:
        padded = value.replace("-", "+").replace("_", "/")
        base64.b64decode(padded + "=" * (-len(padded) % 4), validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def build_rfc822_message(
    to: str = "",
    subject: str = "",
    body_text: str = "",
    cc: str = "",
    bcc: str = "",
    sender: str = "",
) -> bytes:
    """Build a plain-text RFC 822 message with CRLF line endings."""
    message = EmailMessage(policy=SMTP)
    if sender:
        message["From"] = sender
    if to:
        message["To"] = to
    if cc:
        message["Cc"] = cc
    if bcc:
        message["Bcc"] = bcc
    message["Subject"] = subject
    message.set_content(body_text or "", charset="utf-8")
    return message.as_bytes()


class RawMessageEnrichment(EnrichmentHook):
    """Pack human-friendly email fields into a base64url ``raw`` envelope.

    Accepts either ``raw`` (already encoded, or plain RFC 822 text) or
    ``to``/``cc``/``bcc``/``subject``/``body_text``/``from`` fields. With
    ``wrap_in_message`` the payload becomes ``{"message": {...}}`` as draft
    endpoints expect.
    """

    def __init__(self, wrap_in_message: bool = False):
        self.wrap_in_message = wrap_in_message

    @staticmethod
    def _text(body: Dict[str, Any], key: str) -> str:
        value = body.get(key)
        return value.strip() if isinstance(value, str) else ""

    def before_send(self, draft: RequestDraft) -> None:
        body = draft.body
        raw_input = self._text(body, "raw")
        thread_id = self._text(body, "threadId")

        if raw_input:
            if _looks_base64url(raw_input):
                raw = raw_input.replace("+", "-").replace("/", "_").rstrip("=")
            else:
                normalized = re.sub(r"\r?\n", "\r\n", raw_input)
                raw = to_base64url(normalized.encode("utf-8"))
        else:
            to = self._text(body, "to")
            cc = self._text(body, "cc")
            bcc = self._text(body, "bcc")
            if not (to or cc or bcc):
                raise EnrichmentError(
                    "Email message needs at least one recipient (to/cc/bcc).",
                    data={"hint": "Provide raw OR to/subject/body_text."},
                )
            body_text = body.get("body_text")
            raw = to_base64url(
                build_rfc822_message(
                    to=to,
                    cc=cc,
                    bcc=bcc,
                    subject=self._text(body, "subject"),
                    body_text=body_text if isinstance(body_text, str) else "",
                    sender=self._text(body, "from"),
                )
            )

        payload: Dict[str, Any] = {"raw": raw}
        if thread_id:
            payload["threadId"] = thread_id
        draft.body = {"message": payload} if self.wrap_in_message else payload


EnrichmentTable = Dict[Tuple[str, str], EnrichmentHook]

DEFAULT_ENRICHMENTS: EnrichmentTable = {
    ("spotify", "create_playlist"): CurrentUserIdEnrichment(),
    ("gmail", "send_message"): RawMessageEnrichment(),
    ("gmail", "create_draft"): RawMessageEnrichment(wrap_in_message=True),
}


def get_enrichment(
    table: EnrichmentTable, manifest_name: str, action_id: str
) -> Optional[EnrichmentHook]:
    return table.get((manifest_name, action_id))
