"""HTTP transport for the ClockOn web portal: session cookie, login form, button callbacks."""

import logging
from typing import Dict, Optional

import requests
import urllib3

from clock_errors import BadHeaderLen, LoginFailure, NoHeader, TransportError
from clock_portal import Action

logger = logging.getLogger(__name__)

# The portal presents a certificate that does not validate.
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

SESSION_ID_LEN = 45
# The failed-login page is larger than the dashboard.
LOGIN_FAILURE_BODY_LEN = 75000


class PortalSession:
    def __init__(self, base_url: str, username: str, password: str, user_agent: str,
                 timeout: float = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.session.verify = False

    def __enter__(self) -> "PortalSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"HTTP {method} -> {url}")
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"HTTP {method} {url} failed: {e}") from e
        logger.debug(f"HTTP {method} {url} returned status {resp.status_code}")
        return resp

    def acquire_cookie(self) -> str:
        logger.info("Requesting cookie")
        resp = self._request("GET", self.base_url)
        header = resp.headers.get("Set-Cookie")
        if header is None:
            raise NoHeader()
        logger.debug("Extracting session ID")
        session_id = header[:SESSION_ID_LEN]
        if len(session_id) != SESSION_ID_LEN:
            raise BadHeaderLen(session_id)
        return session_id

    def login(self, cookie: str) -> str:
        logger.info("Logging in")
        form: Dict[str, str] = {
            "USRNMEEDT": self.username,
            "PSSWRDEDT": self.password,
            "IW_Action": "LOGINBTN",
        }
        resp = self._request("POST", self.base_url, headers={"Cookie": cookie}, data=form)
        body = resp.text
        if len(body) >= LOGIN_FAILURE_BODY_LEN:
            raise LoginFailure(len(body))
        logger.debug(f"Login page received ({len(body)} chars)")
        return body

    def callback_url(self, action: Action) -> str:
        return f"{self.base_url}$/callback?callback={action.wire_code}.DoOnAsyncClick&which=0&modifiers="

    def submit_action(self, cookie: str, action: Action) -> str:
        logger.info(f"Doing action: {action}")
        resp = self._request("POST", self.callback_url(action), headers={"Cookie": cookie})
        return resp.text
