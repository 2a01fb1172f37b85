"""One GitHub login attempt from redirect to session.

``start`` issues a state token and returns the authorize URL. ``complete``
runs the callback stages in order: validate, exchange, fetch identity,
materialize. Each stage only runs when every earlier one succeeded, so no
failure leaves a partial session behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from repo_analyzer.auth.exceptions import OAuthFlowError
from repo_analyzer.auth.models import SessionKind
from repo_analyzer.observability.logging import bind_context, get_logger
from repo_analyzer.observability.metrics import record_login


if TYPE_CHECKING:
    from collections.abc import Mapping

    from starlette.responses import Response

    from repo_analyzer.auth.analytics import UsageAnalytics
    from repo_analyzer.auth.authorize import AuthorizationRequestBuilder
    from repo_analyzer.auth.callback import CallbackValidator
    from repo_analyzer.auth.models import Session
    from repo_analyzer.auth.protocols import IdentityFetcher, TokenExchangeClient
    from repo_analyzer.auth.session import SessionMaterializer
    from repo_analyzer.auth.state import StateTokenGenerator

logger = get_logger(__name__)


class OAuthLoginFlow:
    """Orchestrates the login components for the GitHub provider."""

    def __init__(
        self,
        *,
        generator: StateTokenGenerator,
        builder: AuthorizationRequestBuilder,
        validator: CallbackValidator,
        exchanger: TokenExchangeClient,
        fetcher: IdentityFetcher,
        materializer: SessionMaterializer,
        redirect_uri: str,
        analytics: UsageAnalytics | None = None,
    ) -> None:
        self._generator = generator
        self._builder = builder
        self._validator = validator
        self._exchanger = exchanger
        self._fetcher = fetcher
        self._materializer = materializer
        self._redirect_uri = redirect_uri
        self._analytics = analytics

    async def start(self) -> str:
        """Begin a login attempt and return the GitHub authorize URL.

        Each call issues an independent state, so several tabs can be
        mid-login at once.
        """
        csrf_state = await self._generator.generate()
        return self._builder.build(csrf_state)

    async def complete(self, params: Mapping[str, str], response: Response) -> Session:
        """Finish a login attempt from the callback query parameters.

        Raises:
            OAuthFlowError: Any stage failed. Nothing was written to
                ``response``.
        """
        try:
            callback = await self._validator.validate(params)
            assert callback.code is not None
            access_token = await self._exchanger.exchange(callback.code, self._redirect_uri)
            identity = await self._fetcher.fetch(access_token)
        except OAuthFlowError as e:
            record_login(SessionKind.PROVIDER, e.code)
            raise

        bind_context(login=identity.login)
        session = self._materializer.materialize(response, identity, access_token)

        if self._analytics is not None:
            self._analytics.record_login(identity.login)
        record_login(SessionKind.PROVIDER, "success")

        logger.info("GitHub login completed", github_id=identity.id)
        return session
