import logging
import re

from lxml import etree

from ..data_models.form_d_models import (
    Address,
    FormDSubmission,
    Issuer,
    Offering,
    PersonName,
    RelatedPerson,
)
from ..errors import MalformedDocument


logger = logging.getLogger(__name__)

FORM_D_PATTERN = re.compile(rb'<edgarSubmission\b.*</edgarSubmission>', re.IGNORECASE | re.DOTALL)

_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def _text(element, path: str) -> str:
    if element is None:
        return ""
    return (element.findtext(path) or "").strip()


def _strip_namespaces(root) -> None:
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = etree.QName(element).localname


def _parse_address(element) -> Address:
    return Address(
        street1=_text(element, "street1"),
        city=_text(element, "city"),
        state_abbreviation=_text(element, "stateOrCountry"),
        state=_text(element, "stateOrCountryDescription"),
        zip_code=_text(element, "zipCode"),
    )


class FormDParser:

    def parse(self, raw: bytes) -> FormDSubmission:
        match = FORM_D_PATTERN.search(raw)
        if match is None:
            raise MalformedDocument("no <edgarSubmission> element found")

        try:
            root = etree.fromstring(match.group(0), parser=_XML_PARSER)
        except etree.XMLSyntaxError as e:
            raise MalformedDocument(f"Error decoding Form D submission: {str(e)}") from e
        _strip_namespaces(root)

        issuer_element = root.find("primaryIssuer")
        issuer = Issuer(
            cik=_text(issuer_element, "cik"),
            name=_text(issuer_element, "entityName"),
            address=_parse_address(issuer_element.find("issuerAddress") if issuer_element is not None else None),
            phone=_text(issuer_element, "issuerPhoneNumber"),
            previous_name=_text(issuer_element, "issuerPreviousNameList/previousName"),
            entity_type=_text(issuer_element, "entityType"),
            year_of_incorporation=_text(issuer_element, "yearOfInc/value"),
        )

        offering_element = root.find("offeringData")
        offering = Offering(
            industry=_text(offering_element, "industryGroup/industryGroupType"),
            signatory_name=_text(offering_element, "signatureBlock/signature/nameOfSigner"),
            signatory_title=_text(offering_element, "signatureBlock/signature/signatureTitle"),
        )

        related_people = []
        for person_element in root.findall("relatedPersonsList/relatedPersonInfo"):
            related_people.append(RelatedPerson(
                name=PersonName(
                    first=_text(person_element, "relatedPersonName/firstName"),
                    last=_text(person_element, "relatedPersonName/lastName"),
                ),
                address=_parse_address(person_element.find("relatedPersonAddress")),
                relationships=[
                    (relationship.text or "").strip()
                    for relationship in person_element.findall("relatedPersonRelationshipList/relationship")
                ],
            ))

        logger.debug("Parsed Form D for %s with %d related people", issuer.cik, len(related_people))
        return FormDSubmission(issuer=issuer, offering=offering, related_people=related_people)
