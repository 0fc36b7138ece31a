"""Subset of an SEC Form D submission needed for key-person exports."""
from typing import List
from pydantic import BaseModel, Field


FORM_D_CSV_COLUMNS = [
    "CIK",
    "Company Name",
    "Legal Form",
    "Industry",
    "Key Person First Name",
    "Key Person Last Name",
    "Key Person Role(s)",
    "Key Person Street 1",
    "Key Person City",
    "Key Person State",
    "Key Person Zip",
]


class Address(BaseModel):

    street1: str = ""
    city: str = ""
    state_abbreviation: str = ""  # stateOrCountry
    state: str = ""  # stateOrCountryDescription
    zip_code: str = ""


class PersonName(BaseModel):

    first: str = ""
    last: str = ""


class RelatedPerson(BaseModel):

    name: PersonName = Field(default_factory=PersonName)
    address: Address = Field(default_factory=Address)
    relationships: List[str] = Field(default_factory=list)


class Issuer(BaseModel):

    cik: str = ""
    name: str = ""
    address: Address = Field(default_factory=Address)
    phone: str = ""
    previous_name: str = ""
    entity_type: str = ""
    year_of_incorporation: str = ""


class Offering(BaseModel):

    industry: str = ""
    signatory_name: str = ""
    signatory_title: str = ""


class FormDSubmission(BaseModel):

    issuer: Issuer = Field(default_factory=Issuer)
    offering: Offering = Field(default_factory=Offering)
    related_people: List[RelatedPerson] = Field(default_factory=list)

    def to_rows(self) -> List[List[str]]:
        """One row per related person, issuer columns repeated on each."""
        issuer_columns = [
            self.issuer.cik,
            self.issuer.name,
            self.issuer.entity_type,
            self.offering.industry,
        ]
        return [
            issuer_columns + [
                person.name.first,
                person.name.last,
                ", ".join(person.relationships),
                person.address.street1,
                person.address.city,
                person.address.state,
                person.address.zip_code,
            ]
            for person in self.related_people
        ]
