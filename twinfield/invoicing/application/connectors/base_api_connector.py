from typing import TypeVar

from lxml import etree

from twinfield.invoicing.application.ports.finder_service_port import FinderServicePort
from twinfield.invoicing.application.ports.process_xml_service_port import (
    ProcessXmlServicePort,
)
from twinfield.shared.infrastructure.xml.mapped_response_collection import (
    MappedResponseCollection,
)
from twinfield.shared.infrastructure.xml.response import Response

T = TypeVar("T")


class BaseApiConnector:
    def __init__(
        self,
        process_xml_service: ProcessXmlServicePort,
        finder_service: FinderServicePort,
    ) -> None:
        self._process_xml_service = process_xml_service
        self._finder_service = finder_service

    async def send_xml_document(self, document: etree._Element) -> Response:
        return await self._process_xml_service.send_document(document)

    @staticmethod
    def unwrap_single_response(collection: MappedResponseCollection[T]) -> T:
        return collection.unwrap_single()
