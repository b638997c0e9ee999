from lxml import etree

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault


class Response:
    """A parsed Twinfield XML payload.

    Twinfield marks each processed element with ``result="1"`` on success and
    annotates failing elements with ``msgtype``/``msg`` attributes.
    """

    def __init__(self, root: etree._Element) -> None:
        self._root = root

    @classmethod
    def from_string(cls, xml: str | bytes) -> "Response":
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        try:
            root = etree.fromstring(xml, parser=etree.XMLParser(resolve_entities=False))
        except etree.XMLSyntaxError as exc:
            raise ShapeFault(f"Twinfield returned malformed XML: {exc}") from exc
        return cls(root)

    @property
    def root(self) -> etree._Element:
        return self._root

    def to_string(self) -> str:
        return etree.tostring(self._root, encoding="unicode")

    def is_successful(self) -> bool:
        result = self._root.get("result")
        if result is None:
            return not self.error_messages()
        return result == "1"

    def error_messages(self) -> list[str]:
        return self._messages("error")

    def warning_messages(self) -> list[str]:
        return self._messages("warning")

    def assert_successful(self) -> None:
        if not self.is_successful():
            raise RemoteServiceError(self.error_messages())

    def _messages(self, message_type: str) -> list[str]:
        return [
            str(message)
            for message in self._root.xpath(
                "descendant-or-self::*[@msgtype=$type]/@msg", type=message_type
            )
        ]
