"""HTTP upload executors, one per paste service."""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type
from urllib.parse import urlsplit

import httpx

from models.errors import UploadFailure
from models.upload import NegotiationOutcome, UploadFile, UploadOutcome

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
USER_AGENT = "bins/1.0"


class UploadExecutor:
    """
    Base executor.

    Multi-file services upload the whole batch as one paste; single-file
    services upload one paste per file concurrently. Every unit produces an
    outcome, a failing unit never cancels its siblings.
    """

    name: str = ""
    multi_file: bool = False

    def __init__(self, settings: Mapping[str, Any], client: httpx.AsyncClient):
        self.settings = settings
        self.client = client
        self._logger = logging.getLogger(__name__)

    async def execute(
        self, files: Sequence[UploadFile], negotiation: NegotiationOutcome, raw_urls: bool = False
    ) -> List[UploadOutcome]:
        """
        Upload ``files`` and return one outcome per upload unit.

        With ``raw_urls`` each successful unit also carries the URLs of its
        raw content; a failed raw lookup fails the unit.
        """
        if self.multi_file:
            units = [(self._unit_name(files), list(files))]
        else:
            units = [(f.name, [f]) for f in files]

        results = await asyncio.gather(
            *(self._run_unit(unit, unit_files, negotiation, raw_urls) for unit, unit_files in units),
            return_exceptions=True,
        )

        outcomes = []
        for (unit, _), result in zip(units, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                reason = result.reason if isinstance(result, UploadFailure) else str(result) or type(result).__name__
                self._logger.error(f"could not upload {unit} to {self.name}: {reason}")
                outcomes.append(UploadOutcome(unit=unit, error=reason))
            else:
                url, raw = result
                self._logger.debug(f"uploaded {unit} to {url}")
                outcomes.append(UploadOutcome(unit=unit, url=url, raw_urls=raw))
        return outcomes

    async def _run_unit(
        self, unit: str, files: List[UploadFile], negotiation: NegotiationOutcome, raw_urls: bool
    ) -> Tuple[str, Tuple[str, ...]]:
        url = await self.upload(files, negotiation)
        if not raw_urls:
            return url, ()
        try:
            raw = await self.raw_urls(url)
        except UploadFailure as e:
            raise UploadFailure(unit, f"uploaded to {url} but could not get raw URLs: {e.reason}") from e
        return url, tuple(raw)

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        """Upload one unit and return its URL."""
        raise NotImplementedError

    async def raw_urls(self, url: str) -> List[str]:
        """Raw content URLs for a paste page; services that need the API override this."""
        return [self.format_raw_url(url)]

    def format_raw_url(self, url: str) -> str:
        return url

    def setting(self, key: str, default: str = "") -> str:
        value = self.settings.get(key, default)
        return value if isinstance(value, str) else default

    def _unit_name(self, files: Sequence[UploadFile]) -> str:
        return files[0].name if len(files) == 1 else f"{len(files)} files"

    async def _post(self, unit: str, url: str, **kwargs) -> httpx.Response:
        return await self._request("POST", unit, url, **kwargs)

    async def _get(self, unit: str, url: str, **kwargs) -> httpx.Response:
        return await self._request("GET", unit, url, **kwargs)

    async def _request(self, method: str, unit: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise UploadFailure(unit, f"{type(e).__name__}: {e}") from e
        if response.is_error:
            raise UploadFailure(unit, f"{self.name} returned HTTP {response.status_code}: {_snippet(response.text)}")
        return response

    def _json(self, unit: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise UploadFailure(unit, f"{self.name} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise UploadFailure(unit, f"{self.name} returned an unexpected response")
        return data


def _snippet(text: str, limit: int = 200) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[:limit] + "..."


def _path_parts(url: str) -> List[str]:
    return [part for part in urlsplit(url).path.split("/") if part]


def _paste_id(url: str) -> str:
    parts = _path_parts(url)
    if not parts:
        raise UploadFailure(url, "could not parse paste ID from URL")
    return parts[-1]


class GistExecutor(UploadExecutor):
    name = "gist"
    multi_file = True
    api_url = "https://api.github.com/gists"

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        unit = self._unit_name(files)
        headers = {"Accept": "application/vnd.github+json"}
        token = self.setting("access_token")
        if negotiation.effective_authed and token:
            headers["Authorization"] = f"token {token}"

        payload = {
            "description": "",
            "public": not negotiation.effective_private,
            "files": {f.name: {"content": f.text()} for f in files},
        }
        response = await self._post(unit, self.api_url, json=payload, headers=headers)
        data = self._json(unit, response)
        url = data.get("html_url")
        if not url:
            raise UploadFailure(unit, "gist response did not contain a URL")
        return url

    async def raw_urls(self, url: str) -> List[str]:
        headers = {"Accept": "application/vnd.github+json"}
        response = await self._get(url, f"{self.api_url}/{_paste_id(url)}", headers=headers)
        files = self._json(url, response).get("files") or {}
        raw = [f["raw_url"] for f in files.values() if isinstance(f, dict) and f.get("raw_url")]
        if not raw:
            raise UploadFailure(url, "gist response did not contain raw URLs")
        return raw


class PastebinExecutor(UploadExecutor):
    name = "pastebin"
    api_url = "https://pastebin.com/api/api_post.php"

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        upload_file = files[0]
        api_key = self.setting("api_key")
        if not api_key:
            raise UploadFailure(upload_file.name, "no pastebin api_key is configured")

        form = {
            "api_dev_key": api_key,
            "api_option": "paste",
            "api_paste_code": upload_file.text(),
            "api_paste_name": upload_file.name,
            "api_paste_private": "1" if negotiation.effective_private else "0",
        }
        response = await self._post(upload_file.name, self.api_url, data=form)
        body = response.text.strip()
        if not body.startswith("http"):
            raise UploadFailure(upload_file.name, f"pastebin refused the paste: {_snippet(body)}")
        return body

    def format_raw_url(self, url: str) -> str:
        # https://pastebin.com/XYZ -> https://pastebin.com/raw/XYZ
        split = urlsplit(url)
        return f"{split.scheme}://{split.netloc}/raw/{_paste_id(url)}"


class HastebinExecutor(UploadExecutor):
    name = "hastebin"
    default_server = "https://hastebin.com"

    def server(self) -> str:
        return self.setting("server", self.default_server).rstrip("/") or self.default_server

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        upload_file = files[0]
        server = self.server()
        response = await self._post(upload_file.name, f"{server}/documents", content=upload_file.content)
        key = self._json(upload_file.name, response).get("key")
        if not key:
            raise UploadFailure(upload_file.name, "hastebin response did not contain a key")
        return f"{server}/{key}"

    def format_raw_url(self, url: str) -> str:
        return f"{self.server()}/raw/{_paste_id(url)}"


class BitbucketExecutor(UploadExecutor):
    name = "bitbucket"
    multi_file = True
    api_url = "https://api.bitbucket.org/2.0/snippets"

    def credentials(self, unit: str) -> Tuple[str, str]:
        username = self.setting("username")
        password = self.setting("app_password")
        if not username or not password:
            raise UploadFailure(unit, "bitbucket username and app_password must be configured")
        return username, password

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        unit = self._unit_name(files)
        auth = self.credentials(unit)

        data = {
            "title": files[0].name if len(files) == 1 else "",
            "is_private": "true" if negotiation.effective_private else "false",
        }
        multipart = [("file", (f.name, f.content, "text/plain")) for f in files]
        response = await self._post(unit, self.api_url, data=data, files=multipart, auth=auth)
        url = self._json(unit, response).get("links", {}).get("html", {}).get("href")
        if not url:
            raise UploadFailure(unit, "bitbucket response did not contain a URL")
        return url

    async def raw_urls(self, url: str) -> List[str]:
        # https://bitbucket.org/snippets/{workspace}/{id}[/{slug}]
        parts = _path_parts(url)
        if len(parts) < 3 or parts[0] != "snippets":
            raise UploadFailure(url, "could not parse snippet ID from URL")
        response = await self._get(url, f"{self.api_url}/{parts[1]}/{parts[2]}", auth=self.credentials(url))
        files = self._json(url, response).get("files") or {}
        raw = [
            f["links"]["self"]["href"]
            for f in files.values()
            if isinstance(f, dict) and f.get("links", {}).get("self", {}).get("href")
        ]
        if not raw:
            raise UploadFailure(url, "bitbucket response did not contain raw URLs")
        return raw


class PasteGgExecutor(UploadExecutor):
    name = "pastegg"
    multi_file = True
    api_url = "https://api.paste.gg/v1/pastes"
    html_url = "https://paste.gg/p/anonymous"

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        unit = self._unit_name(files)
        headers = {}
        key = self.setting("key")
        if negotiation.effective_authed and key:
            headers["Authorization"] = f"Key {key}"

        payload = {
            "visibility": "unlisted" if negotiation.effective_private else "public",
            "files": [{"name": f.name, "content": {"format": "text", "value": f.text()}} for f in files],
        }
        response = await self._post(unit, self.api_url, json=payload, headers=headers)
        paste_id = self._result(unit, response).get("id")
        if not paste_id:
            raise UploadFailure(unit, "paste.gg response did not contain an id")
        return f"{self.html_url}/{paste_id}"

    async def raw_urls(self, url: str) -> List[str]:
        response = await self._get(url, f"{self.api_url}/{_paste_id(url)}")
        files = self._result(url, response).get("files") or []
        raw = [f"{url}/files/{f['id']}/raw" for f in files if isinstance(f, dict) and f.get("id")]
        if not raw:
            raise UploadFailure(url, "paste.gg response did not contain any files")
        return raw

    def _result(self, unit: str, response: httpx.Response) -> Dict[str, Any]:
        data = self._json(unit, response)
        if data.get("status") != "success":
            raise UploadFailure(unit, f"paste.gg returned {data.get('error') or data.get('status')}")
        result = data.get("result")
        return result if isinstance(result, dict) else {}


class SprungeExecutor(UploadExecutor):
    """sprunge.us returns the raw URL directly."""

    name = "sprunge"
    api_url = "http://sprunge.us"

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        upload_file = files[0]
        response = await self._post(upload_file.name, self.api_url, data={"sprunge": upload_file.text()})
        url = response.text.strip()
        if not url.startswith("http"):
            raise UploadFailure(upload_file.name, f"sprunge returned {_snippet(url)!r}")
        return url


class FedoraExecutor(UploadExecutor):
    name = "fedora"
    api_url = "https://paste.fedoraproject.org/api/paste/submit"

    async def upload(self, files: List[UploadFile], negotiation: NegotiationOutcome) -> str:
        upload_file = files[0]
        payload = {
            "title": upload_file.name,
            "contents": upload_file.text(),
            "language": "text",
        }
        response = await self._post(upload_file.name, self.api_url, json=payload)
        data = self._json(upload_file.name, response)
        if not data.get("success"):
            message = data.get("message") or "unknown error"
            raise UploadFailure(upload_file.name, f"fedora paste refused the paste: {message}")
        url = (data.get("result") or {}).get("url")
        if not url:
            raise UploadFailure(upload_file.name, "fedora paste response did not contain a URL")
        return url

    def format_raw_url(self, url: str) -> str:
        return f"{url.rstrip('/')}/raw"


EXECUTORS: Dict[str, Type[UploadExecutor]] = {
    executor.name: executor
    for executor in (
        GistExecutor,
        PastebinExecutor,
        HastebinExecutor,
        BitbucketExecutor,
        PasteGgExecutor,
        SprungeExecutor,
        FedoraExecutor,
    )
}


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Shared async HTTP client for all uploads of one invocation."""
    return httpx.AsyncClient(
        timeout=DEFAULT_TIMEOUT,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        transport=transport,
    )


def create_executor(service: str, settings: Mapping[str, Any], client: httpx.AsyncClient) -> UploadExecutor:
    """Instantiate the executor registered for ``service``."""
    return EXECUTORS[service](settings, client)
