"""GitHub API adapter (github.com and GitHub Enterprise)."""

import logging
from typing import Any, Dict, List

import requests

from pr_release.adapters.base import AuthorizationPendingError, GitPlatformAdapter, GitPlatformError
from pr_release.models import ChangedFile, DeviceCode, PullRequest

log = logging.getLogger("pr_release.adapters.github")

TOKEN_SCOPES = ["repo"]
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"


def _login(data: Dict[str, Any] | None) -> str | None:
    return (data or {}).get("login") or None


def _pr_from_api(data: Dict[str, Any]) -> PullRequest:
    head = data.get("head") or {}
    base = data.get("base") or {}
    return PullRequest(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        user_login=_login(data.get("user")),
        assignee_login=_login(data.get("assignee")),
        head_ref=head.get("ref", ""),
        base_ref=base.get("ref", ""),
        state=data.get("state", "open"),
        html_url=data.get("html_url"),
        raw=data,
    )


def _file_from_api(data: Dict[str, Any]) -> ChangedFile:
    return ChangedFile(
        filename=data.get("filename", ""),
        status=data.get("status", "modified"),
        additions=data.get("additions") or 0,
        deletions=data.get("deletions") or 0,
        raw=data,
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub REST API implementation.

    Enterprise installs are reached through ``<host>/api/v3`` and, for
    compatibility with self-signed certificates, without TLS verification.
    Device-flow login goes to ``web_url`` rather than the API root.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        verify_ssl: bool = True,
        web_url: str = "https://github.com",
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._web_url = web_url.rstrip("/")
        self._session = requests.Session()
        self._session.verify = verify_ssl
        if token:
            self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"
        if not verify_ssl:
            log.warning("TLS certificate verification disabled for %s", self._api_url)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Any = None,
        **kwargs: Any,
    ) -> requests.Response:
        try:
            resp = self._session.request(method, self._url(path), params=params, json=json, timeout=30, **kwargs)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except Exception:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _paginate(self, path: str, params: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint, following Link: rel="next"."""
        items: List[Dict[str, Any]] = []
        url: str | None = path
        page_params: Dict[str, Any] | None = {"per_page": 100, **(params or {})}
        while url:
            resp = self._request("GET", url, params=page_params)
            items.extend(resp.json() or [])
            url = (resp.links or {}).get("next", {}).get("url")
            # the next link already carries the query string
            page_params = None
        return items

    def get_pull_request(self, repo: str, number: int) -> PullRequest:
        resp = self._request("GET", f"/repos/{repo}/pulls/{number}")
        return _pr_from_api(resp.json())

    def list_open_pull_requests(self, repo: str) -> List[PullRequest]:
        data = self._paginate(f"/repos/{repo}/pulls", params={"state": "open"})
        return [_pr_from_api(d) for d in data]

    def list_pull_request_files(self, repo: str, number: int) -> List[ChangedFile]:
        data = self._paginate(f"/repos/{repo}/pulls/{number}/files")
        return [_file_from_api(d) for d in data]

    def create_pull_request(
        self,
        repo: str,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> PullRequest | None:
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        data = resp.json()
        return _pr_from_api(data) if data else None

    def update_pull_request(
        self,
        repo: str,
        number: int,
        title: str,
        body: str,
    ) -> PullRequest | None:
        resp = self._request(
            "PATCH",
            f"/repos/{repo}/pulls/{number}",
            json={"title": title, "body": body},
        )
        data = resp.json()
        return _pr_from_api(data) if data else None

    def add_labels(self, repo: str, number: int, labels: List[str]) -> List[str]:
        resp = self._request("POST", f"/repos/{repo}/issues/{number}/labels", json={"labels": labels})
        data = resp.json() or []
        return [lb["name"] for lb in data if isinstance(lb, dict) and "name" in lb]

    def search_pull_requests(self, repo: str, sha: str) -> List[int]:
        resp = self._request(
            "GET",
            "/search/issues",
            params={"q": f"repo:{repo} is:pr is:closed {sha}"},
        )
        data = resp.json() or {}
        return [item["number"] for item in data.get("items") or [] if "number" in item]

    def _post_form(self, path: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """POST a form to the web host; the OAuth endpoints live outside the API root."""
        resp = self._request(
            "POST",
            f"{self._web_url}{path}",
            data=data,
            headers={"Accept": "application/json"},
        )
        return resp.json() or {}

    def request_device_code(self, client_id: str, scopes: List[str]) -> DeviceCode:
        data = self._post_form("/login/device/code", {"client_id": client_id, "scope": " ".join(scopes)})
        if "error" in data:
            raise GitPlatformError(f"Device code request failed: {data.get('error_description') or data['error']}")
        return DeviceCode.model_validate(data)

    def poll_device_token(self, client_id: str, device_code: str) -> str:
        data = self._post_form(
            "/login/oauth/access_token",
            {"client_id": client_id, "device_code": device_code, "grant_type": DEVICE_GRANT_TYPE},
        )
        token = data.get("access_token")
        if token:
            return token
        error = data.get("error") or "no access token in response"
        if error in ("authorization_pending", "slow_down"):
            raise AuthorizationPendingError(error, slow_down=error == "slow_down")
        raise GitPlatformError(f"Device login failed: {data.get('error_description') or error}")
