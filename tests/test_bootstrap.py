import asyncio
import json
import logging
import sys
import unittest
from unittest.mock import AsyncMock, patch

import httpx

from twinfield.bootstrap import open_invoice_connector
from twinfield.core.config import Settings
from twinfield.shared.infrastructure.logging.structured_logger import (
    JsonFormatter,
    configure_json_logging,
)
from twinfield.shared.infrastructure.soap.twinfield_async_client import TwinfieldAsyncClient
from twinfield_soap_fixtures import logon_response, search_response


class TestOpenInvoiceConnector(unittest.TestCase):
    def test_missing_settings_are_reported(self) -> None:
        async def _open() -> None:
            async with open_invoice_connector(
                Settings(twinfield_username="", twinfield_password="", twinfield_organisation="ACME")
            ):
                pass

        with self.assertRaises(RuntimeError) as context:
            asyncio.run(_open())
        self.assertIn("TWINFIELD_USERNAME, TWINFIELD_PASSWORD", str(context.exception))

    def test_connector_lists_invoices_over_http(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/webservices/session.asmx":
                return httpx.Response(200, text=logon_response())
            return httpx.Response(
                200, text=search_response([["INV1", "100", "CUSTA", "", "D"]])
            )

        async def _list():
            settings = Settings(
                twinfield_username="api-user",
                twinfield_password="secret",
                twinfield_organisation="ACME",
                twinfield_chunk_size=5,
                json_logging=False,
            )
            async with open_invoice_connector(
                settings, transport=httpx.MockTransport(handler)
            ) as connector:
                return await connector.list_all(office_code="OFFICE1")

        invoices = asyncio.run(_list())
        self.assertEqual([invoice.invoice_number for invoice in invoices], ["INV1"])

    def test_client_is_closed_when_wiring_fails(self) -> None:
        async def _open() -> None:
            async with open_invoice_connector(
                Settings(
                    twinfield_username="api-user",
                    twinfield_password="secret",
                    twinfield_organisation="ACME",
                    twinfield_chunk_size=0,
                    json_logging=False,
                )
            ):
                pass

        with patch.object(TwinfieldAsyncClient, "close", new_callable=AsyncMock) as close:
            with self.assertRaises(ValueError):
                asyncio.run(_open())

        self.assertEqual(close.await_count, 1)


class TestJsonLogging(unittest.TestCase):
    def _record(self, **context) -> logging.LogRecord:
        record = logging.LogRecord(
            "twinfield.test", logging.INFO, __file__, 1, "invoice_chunk_sent chunk=%s", (1,), None
        )
        for name, value in context.items():
            setattr(record, name, value)
        return record

    def test_formatter_emits_only_present_context(self) -> None:
        payload = json.loads(JsonFormatter().format(self._record(office="OFFICE1", chunk=1)))

        self.assertEqual(payload["message"], "invoice_chunk_sent chunk=1")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["office"], "OFFICE1")
        self.assertEqual(payload["chunk"], 1)
        self.assertNotIn("position", payload)

    def test_formatter_flattens_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "twinfield.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual(payload["error_type"], "RuntimeError")
        self.assertEqual(payload["error"], "boom")

    def test_configure_json_logging_targets_sdk_logger_once(self) -> None:
        root_handlers = logging.getLogger().handlers[:]
        sdk_logger = logging.getLogger("twinfield")
        original_handlers = sdk_logger.handlers[:]
        original_propagate = sdk_logger.propagate
        original_level = sdk_logger.level
        try:
            configure_json_logging()
            configured = configure_json_logging(level=logging.DEBUG)

            json_handlers = [
                handler
                for handler in configured.handlers
                if isinstance(handler.formatter, JsonFormatter)
            ]
            self.assertIs(configured, sdk_logger)
            self.assertEqual(len(json_handlers), 1)
            self.assertEqual(configured.level, logging.DEBUG)
            self.assertFalse(configured.propagate)
            self.assertEqual(logging.getLogger().handlers, root_handlers)
        finally:
            sdk_logger.handlers = original_handlers
            sdk_logger.propagate = original_propagate
            sdk_logger.setLevel(original_level)


if __name__ == "__main__":
    unittest.main()
