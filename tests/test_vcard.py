"""Tests for the vCard bridge (vobject)."""

import pytest

from contactbook.domain import Contact, Tag
from contactbook.infrastructure import VCardError, export_vcard, import_vcard
from contactbook.infrastructure import vcard

SAMPLE = (
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "N:Doe;Jane;;;\r\n"
    "FN:Jane Doe\r\n"
    "TEL;TYPE=CELL:+12025551111\r\n"
    "EMAIL;TYPE=INTERNET:Jane@Example.com\r\n"
    "ORG:Acme\r\n"
    "END:VCARD\r\n"
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "FN:Jo Roe\r\n"
    "END:VCARD\r\n"
)


def test_loads_maps_known_fields_and_drops_the_rest():
    contacts = vcard.loads(SAMPLE)
    assert len(contacts) == 2
    jane = contacts[0]
    assert (jane.family_name, jane.given_name) == ("Doe", "Jane")
    assert jane.phone_numbers == ("+12025551111",)
    assert jane.emails == ("jane@example.com",)


def test_loads_splits_formatted_name_when_n_missing():
    jo = vcard.loads(SAMPLE)[1]
    assert (jo.given_name, jo.family_name) == ("Jo", "Roe")


def test_dumps_then_loads_keeps_modelled_fields():
    original = Contact(
        family_name="Doe",
        given_name="Jane",
        phone_numbers=("+12025551111",),
        emails=("jane@example.com",),
        tags={"friends", "work"},
    )
    text = vcard.dumps([original])
    assert "FN:Jane Doe" in text
    (parsed,) = vcard.loads(text)
    assert parsed == original
    assert parsed.tags == {Tag("friends"), Tag("work")}


def test_loads_garbage_raises_vcard_error():
    with pytest.raises(VCardError):
        vcard.loads("this is not a vcard")


def test_export_and_import_file(tmp_path):
    path = tmp_path / "out" / "contacts.vcf"
    contacts = [Contact(family_name="Doe", given_name="Jane"), Contact(family_name="Roe", given_name="Jo")]
    export_vcard(path, contacts)
    assert path.exists()
    assert import_vcard(path) == contacts


@pytest.mark.parametrize("bad", [None, "", "   ", "contacts.txt", "contacts.vcf.bak"])
def test_export_rejects_bad_paths(bad, tmp_path):
    with pytest.raises(VCardError):
        export_vcard(bad, [])


def test_import_missing_file(tmp_path):
    with pytest.raises(VCardError, match="No vCard file"):
        import_vcard(tmp_path / "missing.vcf")


def test_vcard_error_is_a_value_error():
    assert issubclass(VCardError, ValueError)


def test_loads_bad_photo_encoding_raises_vcard_error():
    content = (
        "BEGIN:VCARD\r\nVERSION:3.0\r\nN:Doe;Jane;;;\r\nFN:Jane Doe\r\n"
        "PHOTO;ENCODING=b;TYPE=JPEG:!!!notbase64\r\nEND:VCARD\r\n"
    )
    with pytest.raises(VCardError):
        vcard.loads(content)
