from lxml import etree

SALES_INVOICE_TYPE = "salesinvoice"


def build_read_invoice_request(office: str, code: str, invoice_number: str) -> etree._Element:
    """Build the ``<read>`` document that fetches one sales invoice."""
    read = etree.Element("read")
    etree.SubElement(read, "type").text = SALES_INVOICE_TYPE
    etree.SubElement(read, "office").text = office
    etree.SubElement(read, "code").text = code
    etree.SubElement(read, "invoicenumber").text = invoice_number
    return read
