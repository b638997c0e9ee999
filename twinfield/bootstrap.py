from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from twinfield.core.config import Settings, settings as default_settings
from twinfield.invoicing.application.connectors.invoice_api_connector import (
    InvoiceApiConnector,
)
from twinfield.shared.infrastructure.logging.structured_logger import configure_json_logging
from twinfield.shared.infrastructure.services.finder_service import FinderService
from twinfield.shared.infrastructure.services.process_xml_service import ProcessXmlService
from twinfield.shared.infrastructure.soap.twinfield_async_client import (
    TwinfieldAsyncClient,
)


@asynccontextmanager
async def open_invoice_connector(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[InvoiceApiConnector]:
    settings = settings or default_settings
    if settings.json_logging:
        configure_json_logging()

    missing_settings = [
        name
        for name, value in (
            ("TWINFIELD_USERNAME", settings.twinfield_username),
            ("TWINFIELD_PASSWORD", settings.twinfield_password),
            ("TWINFIELD_ORGANISATION", settings.twinfield_organisation),
        )
        if not value
    ]
    if missing_settings:
        raise RuntimeError(
            "Missing required Twinfield environment variables: "
            + ", ".join(missing_settings)
        )

    client = TwinfieldAsyncClient(
        username=settings.twinfield_username,
        password=settings.twinfield_password,
        organisation=settings.twinfield_organisation,
        login_url=settings.twinfield_login_url,
        timeout=settings.twinfield_timeout_seconds,
        transport=transport,
    )
    try:
        yield InvoiceApiConnector(
            process_xml_service=ProcessXmlService(
                client, chunk_size=settings.twinfield_chunk_size
            ),
            finder_service=FinderService(client),
        )
    finally:
        await client.close()
