"""Secret resolution for remote feeds."""

from __future__ import annotations

import base64
import logging

from feedpusher.core.context import PublishContext
from feedpusher.models.routing import InteractionMode

logger = logging.getLogger(__name__)


def resolve_secret(ctx: PublishContext, name: str, *, cache: bool = True) -> str | None:
    """Return the value of the secret environment variable *name*.

    When the variable is missing or blank and the run is interactive, the
    operator is asked for it.  A typed value is written back into the
    context environment (unless *cache* is false) so later feeds and the
    promoter reuse it.
    """
    value = ctx.environ.get(name)
    if value and value.strip():
        return value

    if ctx.interaction is None or ctx.interaction_mode != InteractionMode.INTERACTIVE:
        return None

    value = ctx.interaction.read_secret(name)
    if not value:
        return None
    if cache:
        ctx.environ[name] = value
        logger.debug("Cached %s in the run environment.", name)
    return value


def basic_auth_header(secret: str) -> str:
    """Encode *secret* as an HTTP Basic ``Authorization`` value (empty user)."""
    token = base64.b64encode(f":{secret}".encode("ascii")).decode("ascii")
    return f"Basic {token}"
