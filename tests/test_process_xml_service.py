import unittest

import httpx
from lxml import etree

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault
from twinfield.shared.infrastructure.services.process_xml_service import ProcessXmlService
from twinfield.shared.infrastructure.soap.envelopes import tw
from twinfield.shared.infrastructure.soap.twinfield_async_client import TwinfieldAsyncClient
from twinfield.shared.infrastructure.xml.response import Response
from twinfield_soap_fixtures import (
    logon_response,
    process_xml_response,
    rejected_sales_invoice,
    sales_invoice,
)


def _number(response: Response) -> str:
    return response.root.findtext("header/invoicenumber")


class TestProcessXmlServiceChunking(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TwinfieldAsyncClient(username="u", password="p", organisation="o")

    def test_chunk_preserves_order_and_limits_size(self) -> None:
        service = ProcessXmlService(self.client, chunk_size=2)

        chunks = service.chunk(["a", "b", "c", "d", "e"])

        self.assertEqual(chunks, [["a", "b"], ["c", "d"], ["e"]])

    def test_chunk_of_empty_sequence_is_empty(self) -> None:
        service = ProcessXmlService(self.client)

        self.assertEqual(service.chunk([]), [])
        self.assertEqual(service.chunk_size, ProcessXmlService.DEFAULT_CHUNK_SIZE)

    def test_rejects_non_positive_chunk_size(self) -> None:
        with self.assertRaises(ValueError):
            ProcessXmlService(self.client, chunk_size=0)


class TestProcessXmlServiceMapAll(unittest.TestCase):
    def setUp(self) -> None:
        self.service = ProcessXmlService(
            TwinfieldAsyncClient(username="u", password="p", organisation="o")
        )

    def test_map_all_flattens_responses_in_document_order(self) -> None:
        responses = [
            Response.from_string(
                f'<salesinvoices result="1">{sales_invoice(number="1")}{sales_invoice(number="2")}</salesinvoices>'
            ),
            Response.from_string(
                f'<salesinvoices result="1">{sales_invoice(number="3")}</salesinvoices>'
            ),
        ]

        collection = self.service.map_all(
            responses, "salesinvoice", _number, sources=["s1", "s2", "s3"]
        )

        self.assertEqual([item.result for item in collection], ["1", "2", "3"])
        self.assertEqual([item.source for item in collection], ["s1", "s2", "s3"])
        self.assertFalse(collection.has_failed_responses())

    def test_map_all_keeps_rejected_items_as_errors(self) -> None:
        responses = [
            Response.from_string(
                f'<salesinvoices result="0">{sales_invoice(number="1")}{rejected_sales_invoice()}</salesinvoices>'
            )
        ]

        collection = self.service.map_all(responses, "salesinvoice", _number)

        self.assertEqual(len(collection), 2)
        self.assertEqual(collection[0].unwrap(), "1")
        self.assertIsInstance(collection[1].error, RemoteServiceError)
        self.assertEqual(collection[1].error.messages, ["Customer 9999 does not exist."])
        self.assertEqual(len(collection.failed_responses()), 1)
        self.assertEqual(len(collection.successful_responses()), 1)
        with self.assertRaises(RemoteServiceError):
            collection.assert_successful()

    def test_map_all_raises_document_level_rejection(self) -> None:
        responses = [
            Response.from_string(f'<salesinvoices result="1">{sales_invoice(number="1")}</salesinvoices>'),
            Response.from_string('<salesinvoices result="0" msgtype="error" msg="Document rejected."/>'),
        ]

        with self.assertRaises(RemoteServiceError) as context:
            self.service.map_all(responses, "salesinvoice", _number, sources=["a", "b"])

        self.assertEqual(context.exception.messages, ["Document rejected."])

    def test_map_all_results_unwraps_in_order(self) -> None:
        responses = [
            Response.from_string(
                f'<salesinvoices result="1">{sales_invoice(number="4")}{sales_invoice(number="5")}</salesinvoices>'
            )
        ]

        collection = self.service.map_all(responses, "salesinvoice", _number)

        self.assertEqual(collection.results(), ["4", "5"])
        self.assertTrue(collection[0].response.to_string().startswith('<salesinvoice result="1">'))

    def test_map_all_rejects_source_count_mismatch(self) -> None:
        responses = [Response.from_string(f"<salesinvoices>{sales_invoice()}</salesinvoices>")]

        with self.assertRaises(ShapeFault):
            self.service.map_all(responses, "salesinvoice", _number, sources=["a", "b"])


class TestProcessXmlServiceSendDocument(unittest.IsolatedAsyncioTestCase):
    async def test_send_document_wraps_xml_and_parses_result(self) -> None:
        captured: dict[str, str] = {}

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/webservices/session.asmx":
                return httpx.Response(200, text=logon_response())
            envelope = etree.fromstring(request.content)
            captured["xml_request"] = envelope.findtext(f".//{tw('xmlRequest')}")
            return httpx.Response(200, text=process_xml_response(sales_invoice(number="7")))

        client = TwinfieldAsyncClient(
            username="u", password="p", organisation="o", transport=httpx.MockTransport(handler)
        )
        service = ProcessXmlService(client)

        response = await service.send_document(etree.fromstring("<read><type>salesinvoice</type></read>"))
        await client.close()

        self.assertEqual(
            captured["xml_request"], "<read><type>salesinvoice</type></read>"
        )
        self.assertTrue(response.is_successful())
        self.assertEqual(_number(response), "7")


if __name__ == "__main__":
    unittest.main()
