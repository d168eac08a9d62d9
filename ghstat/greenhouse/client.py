"""
Greenhouse data source: the capability protocol and its HTTP implementation.
"""

from __future__ import annotations

import getpass
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup, Tag

from ghstat.config.models import GreenhouseSettings
from ghstat.errors import FetchError, LoginError
from ghstat.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

TITLE_SELECTOR = ".nav-title"
NO_RESULTS_SELECTOR = ".no_results--header"
RESULTS_COUNT_SELECTOR = "#results_count"


class GreenhouseClient(Protocol):
    """
    Everything ghstat needs from Greenhouse.

    Implementations must tolerate concurrent calls to ``role_title`` and
    ``candidate_count`` from several worker threads.
    """

    def login(self) -> None:
        """Establish an authenticated session; raise LoginError on failure."""

    def role_title(self, role_id: int) -> str:
        """Return the title of the role; raise FetchError on failure."""

    def candidate_count(self, role_id: int, query: Mapping[str, str]) -> int:
        """Return the number of candidates matching ``query``; raise FetchError on failure."""

    def export_state(self) -> list[dict[str, Any]]:
        """Return the session cookies so they can be persisted."""

    def import_state(self, cookies: list[dict[str, Any]]) -> None:
        """Restore cookies saved by a previous run."""


Prompter = Callable[[str, bool], str]


def terminal_prompt(label: str, secret: bool) -> str:
    """
    Ask the user for a value on the terminal, masking secrets.
    """

    if secret:
        return getpass.getpass(f"{label}: ")
    return input(f"{label}: ")


class Greenhouse:
    """
    Greenhouse accessed over HTTP with a cookie-backed session.

    Candidate pages are server rendered, so counts and titles are read from
    the returned HTML with BeautifulSoup.
    """

    def __init__(
        self,
        *,
        settings: GreenhouseSettings,
        session: requests.Session | None = None,
        prompt: Prompter = terminal_prompt,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = settings.user_agent
        self._prompt = prompt

    # -- data lookups -------------------------------------------------------

    def role_title(self, role_id: int) -> str:
        soup = self._fetch_soup(self.candidates_url(role_id))
        element = soup.select_one(TITLE_SELECTOR)
        if element is None:
            raise FetchError(f"title element not found for role {role_id}")
        title = element.get_text(strip=True)
        if not title:
            raise FetchError(f"empty title for role {role_id}")
        return title

    def candidate_count(self, role_id: int, query: Mapping[str, str]) -> int:
        soup = self._fetch_soup(self.candidates_url(role_id, query))

        # This header replaces the results count when nothing matches
        if soup.select_one(NO_RESULTS_SELECTOR) is not None:
            return 0

        element = soup.select_one(RESULTS_COUNT_SELECTOR)
        if element is None:
            raise FetchError(f"candidate count not found for role {role_id}")

        raw = element.get_text(strip=True).replace(",", "")
        try:
            return int(raw)
        except ValueError as exc:
            raise FetchError(f"failed to parse candidate count {raw!r} for role {role_id}") from exc

    def candidates_url(self, role_id: int, query: Mapping[str, str] | None = None) -> str:
        """
        Candidate listing URL for a role, narrowed by ``query``.
        """

        params: list[tuple[str, str]] = [
            ("hiring_plan_id[]", str(role_id)),
            ("job_status", "open"),
            ("stage_status_id[]", "2"),
            ("type", "all"),
        ]
        params.extend((query or {}).items())
        prepared = requests.Request(
            "GET",
            f"{self.settings.base_url}/plans/{role_id}/candidates",
            params=params,
        ).prepare()
        return str(prepared.url)

    # -- session ------------------------------------------------------------

    def login(self) -> None:
        """
        Make sure the session is authenticated, walking the SSO flow if needed.

        Credentials come from settings (``U1_LOGIN`` / ``U1_PASSWORD``) or
        the prompt; the one-time password is always prompted.
        """

        try:
            response = self._request("GET", self.settings.base_url)
        except FetchError as exc:
            raise LoginError(f"failed to open {self.settings.base_url}: {exc}") from exc

        if not self._on_login_host(response.url):
            logger.debug("existing Greenhouse session is valid")
            return

        log_event(logger, logging.INFO, "login_required", url=response.url)
        try:
            email = self.settings.login or self._prompt("Ubuntu One Login", False)
            password = self.settings.password or self._prompt("Ubuntu One Password", True)
        except (EOFError, OSError) as exc:
            raise LoginError(f"failed to read credentials: {exc}") from exc

        response = self._submit_form(
            response,
            form_marker="#id_email",
            values={"email": email, "password": password},
        )

        soup = BeautifulSoup(response.text, "html.parser")
        if soup.select_one("#id_oath_token") is not None:
            try:
                otp = self._prompt("Ubuntu One OTP", False)
            except (EOFError, OSError) as exc:
                raise LoginError(f"failed to read otp: {exc}") from exc
            response = self._submit_form(
                response,
                form_marker="#id_oath_token",
                values={"oath_token": otp},
            )

        response = self._follow_saml_forms(response)
        if self._on_login_host(response.url):
            raise LoginError("still on the login page after submitting credentials")
        log_event(logger, logging.INFO, "login_completed", url=response.url)

    def export_state(self) -> list[dict[str, Any]]:
        return [
            {
                "name": cookie.name,
                "value": cookie.value,
                "domain": cookie.domain,
                "path": cookie.path,
                "secure": cookie.secure,
                "expires": cookie.expires,
            }
            for cookie in self.session.cookies
        ]

    def import_state(self, cookies: list[dict[str, Any]]) -> None:
        for cookie in cookies:
            self.session.cookies.set(
                cookie["name"],
                cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
                secure=bool(cookie.get("secure", False)),
                expires=cookie.get("expires"),
            )

    # -- helpers ------------------------------------------------------------

    def _on_login_host(self, url: str) -> bool:
        return urlparse(url).netloc == urlparse(self.settings.login_url).netloc

    def _submit_form(
        self,
        response: requests.Response,
        *,
        form_marker: str,
        values: Mapping[str, str],
    ) -> requests.Response:
        soup = BeautifulSoup(response.text, "html.parser")
        marker = soup.select_one(form_marker)
        form = marker.find_parent("form") if marker is not None else None
        if not isinstance(form, Tag):
            raise LoginError(f"login form containing '{form_marker}' not found at {response.url}")

        payload = _form_fields(form)
        payload.update(values)
        action = urljoin(response.url, str(form.get("action") or response.url))
        try:
            return self._request("POST", action, data=payload)
        except FetchError as exc:
            raise LoginError(f"failed to submit login form: {exc}") from exc

    def _follow_saml_forms(self, response: requests.Response, max_hops: int = 3) -> requests.Response:
        for _ in range(max_hops):
            soup = BeautifulSoup(response.text, "html.parser")
            saml = soup.select_one("input[name=SAMLResponse]")
            form = saml.find_parent("form") if saml is not None else None
            if not isinstance(form, Tag):
                return response
            action = urljoin(response.url, str(form.get("action") or response.url))
            try:
                response = self._request("POST", action, data=_form_fields(form))
            except FetchError as exc:
                raise LoginError(f"failed to complete single sign-on: {exc}") from exc
        return response

    def _fetch_soup(self, url: str) -> BeautifulSoup:
        response = self._request("GET", url)
        if self._on_login_host(response.url):
            raise FetchError(f"session expired, redirected to login while fetching {url}")
        return BeautifulSoup(response.text, "html.parser")

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        last_error: Exception | None = None

        for attempt in range(self.settings.max_retries + 1):
            try:
                response = self.session.request(
                    method,
                    url,
                    timeout=self.settings.timeout_seconds,
                    allow_redirects=True,
                    **kwargs,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as exc:
                last_error = exc
                if isinstance(exc, requests.HTTPError):
                    status_code = exc.response.status_code if exc.response is not None else None
                    if status_code not in RETRYABLE_STATUS_CODES:
                        raise FetchError(f"request to {url} failed: {exc}") from exc

            if attempt >= self.settings.max_retries:
                break

            backoff_seconds = self.settings.backoff_initial_seconds * (
                self.settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.DEBUG,
                "request_retry",
                url=url,
                attempt=attempt + 1,
                backoff_seconds=backoff_seconds,
                error=str(last_error),
            )
            time.sleep(backoff_seconds)

        raise FetchError(f"failed to fetch {url} after retries: {last_error}")


def _form_fields(form: Tag) -> dict[str, str]:
    fields: dict[str, str] = {}
    for field in form.find_all("input"):
        name = field.get("name")
        if not name or field.get("type") in {"submit", "button"}:
            continue
        fields[str(name)] = str(field.get("value") or "")
    return fields
