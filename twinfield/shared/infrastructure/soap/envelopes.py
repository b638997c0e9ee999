from lxml import etree

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault

SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"
TWINFIELD_NS = "http://www.twinfield.com/"
NSMAP = {"soap": SOAP_NS, "tw": TWINFIELD_NS}


def tw(tag: str) -> str:
    return f"{{{TWINFIELD_NS}}}{tag}"


def build_element(tag: str, children: dict[str, object] | None = None) -> etree._Element:
    """Build ``<tag xmlns="http://www.twinfield.com/">`` with simple text children."""
    element = etree.Element(tw(tag), nsmap={None: TWINFIELD_NS})
    for name, value in (children or {}).items():
        etree.SubElement(element, tw(name)).text = "" if value is None else str(value)
    return element


def build_envelope(body: etree._Element, session_id: str | None = None) -> bytes:
    envelope = etree.Element(f"{{{SOAP_NS}}}Envelope", nsmap={"soap": SOAP_NS})
    if session_id is not None:
        header = etree.SubElement(envelope, f"{{{SOAP_NS}}}Header")
        session_header = etree.SubElement(
            header, tw("Header"), nsmap={None: TWINFIELD_NS}
        )
        etree.SubElement(session_header, tw("SessionID")).text = session_id
    etree.SubElement(envelope, f"{{{SOAP_NS}}}Body").append(body)
    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")


def parse_envelope(
    content: bytes,
) -> tuple[etree._Element | None, etree._Element]:
    """Return the SOAP header and the first element inside ``soap:Body``."""
    try:
        envelope = etree.fromstring(
            content, parser=etree.XMLParser(resolve_entities=False)
        )
    except etree.XMLSyntaxError as exc:
        raise ShapeFault(f"Twinfield returned a malformed SOAP envelope: {exc}") from exc

    body = envelope.find(f"{{{SOAP_NS}}}Body")
    if body is None or len(body) == 0:
        raise ShapeFault("Twinfield SOAP envelope has no body")

    payload = body[0]
    if payload.tag == f"{{{SOAP_NS}}}Fault":
        raise RemoteServiceError(
            payload.findtext("faultstring")
            or payload.findtext("faultcode")
            or "SOAP fault"
        )
    return envelope.find(f"{{{SOAP_NS}}}Header"), payload
