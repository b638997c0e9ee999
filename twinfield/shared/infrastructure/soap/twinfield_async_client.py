import logging
from dataclasses import dataclass

import httpx
from lxml import etree

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault
from twinfield.shared.infrastructure.soap.envelopes import (
    build_element,
    build_envelope,
    parse_envelope,
    tw,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TwinfieldSession:
    session_id: str
    cluster: str


class TwinfieldAsyncClient:
    _SESSION_PATH = "/webservices/session.asmx"
    _LOGON_ACTION = "http://www.twinfield.com/Logon"

    def __init__(
        self,
        username: str,
        password: str,
        organisation: str,
        login_url: str = "https://login.twinfield.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._username = username
        self._password = password
        self._organisation = organisation
        self._login_url = login_url.rstrip("/")
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._session: TwinfieldSession | None = None

    async def close(self) -> None:
        await self._http_client.aclose()

    async def authenticate(self, force_refresh: bool = False) -> TwinfieldSession:
        if not force_refresh and self._session is not None:
            return self._session

        missing_credentials = [
            name
            for name, value in (
                ("username", self._username),
                ("password", self._password),
                ("organisation", self._organisation),
            )
            if not value
        ]
        if missing_credentials:
            raise RuntimeError(
                "Twinfield authentication failed: missing credentials "
                + ", ".join(missing_credentials)
            )

        body = build_element(
            "Logon",
            {
                "user": self._username,
                "password": self._password,
                "organisation": self._organisation,
            },
        )
        header, payload = await self._post(
            self._login_url + self._SESSION_PATH, self._LOGON_ACTION, build_envelope(body)
        )

        logon_result = payload.findtext(tw("LogonResult"))
        if logon_result != "Ok":
            raise RemoteServiceError(
                f"Twinfield logon failed: {logon_result or 'no result'}"
            )

        session_id = header.findtext(f".//{tw('SessionID')}") if header is not None else None
        cluster = payload.findtext(tw("cluster"))
        if not session_id or not cluster:
            raise ShapeFault("Twinfield logon response lacks a session id or cluster")

        self._session = TwinfieldSession(session_id=session_id, cluster=cluster.rstrip("/"))
        logger.info("twinfield_session_opened cluster=%s", self._session.cluster)
        return self._session

    async def call(
        self, service_path: str, action: str, body: etree._Element
    ) -> etree._Element:
        session = await self.authenticate()
        _, payload = await self._post(
            session.cluster + service_path,
            action,
            build_envelope(body, session_id=session.session_id),
        )
        return payload

    async def _post(
        self, url: str, action: str, envelope: bytes
    ) -> tuple[etree._Element | None, etree._Element]:
        response = await self._http_client.post(
            url,
            content=envelope,
            headers={
                "Content-Type": "text/xml; charset=utf-8",
                "SOAPAction": f'"{action}"',
            },
        )
        # SOAP faults arrive with a 500 status and must win over the HTTP error.
        if response.is_error and b"Fault" not in response.content:
            response.raise_for_status()
        header, payload = parse_envelope(response.content)
        response.raise_for_status()
        return header, payload
