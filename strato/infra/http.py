from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

import aiohttp
from loguru import logger

MAX_LOGGED_BODY = 1000

# ─── Errors ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HttpError(Exception):
    status: int
    body: str

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.body}" if self.body else f"HTTP {self.status}"


# ─── Auth ────────────────────────────────────────────────────────────


@runtime_checkable
class Auth(Protocol):
    async def headers(self) -> dict[str, str]: ...


class BearerAuth:
    def __init__(self, token: str) -> None:
        self._token = token

    async def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    def __repr__(self) -> str:
        return "BearerAuth(token=***)"


# ─── Request logging ─────────────────────────────────────────────────


def describe_request(
    method: str,
    url: str,
    headers: dict[str, str],
    *,
    json: dict[str, Any] | list[Any] | None = None,
    params: dict[str, Any] | None = None,
) -> str:
    """Multi-line summary of an outgoing request, safe to log.

    The Authorization header is reduced to its scheme; the body is
    truncated to MAX_LOGGED_BODY characters.
    """
    lines = ["HTTP Request:", f"  Method: {method}", f"  URL: {url}"]
    if params:
        query = "&".join(f"{k}={v}" for k, v in params.items())
        lines.append(f"  Query: {query}")

    body = jsonlib.dumps(json) if json is not None else ""
    if body:
        lines.append(f"  Content Length: {len(body.encode())}")
    for name in ("User-Agent", "Content-Type"):
        if value := headers.get(name):
            lines.append(f"  {name}: {value}")

    auth = headers.get("Authorization", "")
    match auth.split(" ", 1)[0].lower():
        case "bearer":
            lines.append("  Auth Type: bearer")
        case "basic":
            lines.append("  Auth Type: basic")
        case _:
            pass

    if body:
        if len(body) > MAX_LOGGED_BODY:
            body = body[:MAX_LOGGED_BODY] + "... [truncated]"
        lines.append(f"  Body: {body}")
    return "\n".join(lines)


# ─── Client ──────────────────────────────────────────────────────────


class HttpClient:
    def __init__(
        self,
        base_url: str,
        auth: Auth | None = None,
        *,
        timeout: float = 30,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = auth
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._default_headers = default_headers or {}
        self._session: aiohttp.ClientSession | None = None
        self._log = logger.bind(component="http")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = dict(self._default_headers)
        if self._auth:
            headers.update(await self._auth.headers())
        if extra:
            headers.update(extra)
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        format: Literal["json", "text"] = "json",
    ) -> tuple[int, Any]:
        session = await self._ensure_session()
        url = self._url(path)
        request_headers = await self._build_headers(headers)
        self._log.debug(
            "{summary}",
            summary=describe_request(method, url, request_headers, json=json, params=params),
        )

        try:
            async with session.request(
                method, url, headers=request_headers, json=json, params=params
            ) as resp:
                return await self._parse(resp, format)
        except aiohttp.ClientResponseError as e:
            raise HttpError(status=e.status, body=e.message) from e
        except aiohttp.ClientError as e:
            raise HttpError(status=0, body=str(e)) from e

    async def _parse(
        self, resp: aiohttp.ClientResponse, format: Literal["json", "text"]
    ) -> tuple[int, Any]:
        if resp.status >= 400:
            body = await resp.text()
            self._log.debug(
                "HTTP {status} from {url}: {body}",
                status=resp.status, url=str(resp.url), body=body[:500],
            )
            raise HttpError(status=resp.status, body=body)
        match format:
            case "json":
                raw = await resp.read()
                if not raw:
                    return resp.status, None
                try:
                    return resp.status, jsonlib.loads(raw)
                except ValueError as e:
                    body = raw.decode(errors="replace")[:500]
                    raise HttpError(status=resp.status, body=body) from e
            case "text":
                return resp.status, await resp.text()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        format: Literal["json", "text"] = "json",
    ) -> Any:
        _, data = await self._send(
            method, path, json=json, params=params, headers=headers, format=format,
        )
        return data

    # ─── Lifecycle ───────────────────────────────────────────────────

    async def close(self) -> None:
        if self._session and not self._session.closed:
            self._log.debug("Closing HTTP session")
            await self._session.close()

    async def __aenter__(self) -> HttpClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
