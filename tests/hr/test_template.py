from src.time_tracker.time_tracker.core.enums import RecipientStatus
from src.time_tracker.time_tracker.hr.model import Recipient
from src.time_tracker.time_tracker.hr.template import (
    DEFAULT_TEMPLATE,
    personalize,
    template_from_mapping,
    template_to_mapping,
)

RECIPIENT = Recipient(
    row=1, email="a@example.com", name="Dr. A\\B", language="EN", salutation="Sie", status=RecipientStatus.PENDING
)


def test_placeholders_are_case_insensitive():
    assert personalize("{Anrede} {NAME}, {sprache}", RECIPIENT) == "Sie Dr. A\\B, EN"


def test_unknown_placeholders_are_left_alone():
    assert personalize("{vorname}", RECIPIENT) == "{vorname}"


def test_empty_mapping_falls_back_to_default():
    assert template_from_mapping(None) == DEFAULT_TEMPLATE
    assert template_from_mapping({"subject": "", "body": "Hallo"}).subject == DEFAULT_TEMPLATE.subject


def test_mapping_round_trip():
    assert template_from_mapping(template_to_mapping(DEFAULT_TEMPLATE)) == DEFAULT_TEMPLATE
