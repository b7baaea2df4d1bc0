"""HTTP fetching over a single shared httpx client."""

from __future__ import annotations

import time

import httpx

from ..config import HttpConfig
from .outcomes import FetchOutcome, TaskError


class Fetcher:
    """Issue one GET per target; failures come back as data.

    The client is built once and shared by every worker thread. Responses are
    opened in streaming mode so the body is only read by the matching stage;
    callers must close the returned outcome (it is a context manager).

    httpx applies ``timeout`` to each connect and read separately, so every
    outcome also carries a deadline that bounds the whole request, body
    included. ``max_connections`` of ``None`` leaves the pool uncapped; the
    dispatcher is what limits concurrency.
    """

    def __init__(
        self,
        http_config: HttpConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        max_connections: int | None = None,
    ) -> None:
        self.http_config = http_config or HttpConfig()
        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections,
        )
        headers = {"User-Agent": self.http_config.user_agent} if self.http_config.user_agent else None
        client_kwargs: dict = {
            "follow_redirects": self.http_config.follow_redirects,
            "timeout": self.http_config.timeout,
            "headers": headers,
            "verify": self.http_config.verify_tls,
            "limits": self.limits,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def resolve_url(self, target: str) -> str:
        target = target.strip()
        if "://" in target:
            return target
        return f"{self.http_config.default_scheme}{target}"

    def fetch(self, target: str) -> FetchOutcome:
        if not target.strip():
            return FetchOutcome(target=target, error=TaskError("invalid_url", "empty target"))
        deadline = time.monotonic() + self.http_config.timeout
        response: httpx.Response | None = None
        try:
            request = self._client.build_request("GET", self.resolve_url(target))
            response = self._client.send(request, stream=True)
            outcome = FetchOutcome(target=target, response=response, deadline=deadline)
            outcome.check_deadline()
            if self.http_config.fail_on_http_error and self._is_failure(response):
                raise httpx.HTTPStatusError(
                    f"Unexpected status {response.status_code}",
                    request=request,
                    response=response,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # The outcome closes the response: an error always wins over it.
            return FetchOutcome(
                target=target,
                response=response,
                error=TaskError.from_exception(exc, default_kind="transport"),
            )
        return outcome

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        return response.status_code >= 400


__all__ = ["Fetcher"]
