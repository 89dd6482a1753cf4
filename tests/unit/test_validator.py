import pytest

from docuextract.extraction.exceptions import MalformedResponseError
from docuextract.extraction.validator import LOW_CONFIDENCE_CAP, validate_and_build


def _payload(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "name": "Erika Mustermann",
        "address": "Heidestrasse 17",
        "postalcode": "51147",
        "city": "Koeln",
        "birthday": "12.08.1964",
        "date": "01.03.2024",
        "time": "14:30",
        "handwritten": False,
        "signed": True,
        "stamp": "BB",
        "confidence": 92,
    }
    data.update(overrides)
    return data


class TestValidateAndBuild:
    def test_valid_payload(self) -> None:
        fields = validate_and_build(_payload())

        assert fields.name == "Erika Mustermann"
        assert fields.postal_code == "51147"
        assert fields.document_date == "01.03.2024"
        assert fields.signed is True
        assert fields.handwritten is False
        assert fields.confidence == 92
        assert fields.warnings == ()

    def test_rejects_non_object(self) -> None:
        with pytest.raises(MalformedResponseError, match="JSON object"):
            validate_and_build(["name"])

    def test_missing_fields_become_none(self) -> None:
        fields = validate_and_build({})

        assert fields.name is None
        assert fields.stamp is None
        assert fields.confidence is None
        assert fields.handwritten is False
        assert fields.signed is False

    def test_blank_strings_become_none(self) -> None:
        fields = validate_and_build(_payload(name="   ", city=""))
        assert fields.name is None
        assert fields.city is None

    def test_numeric_postal_code_is_stringified(self) -> None:
        assert validate_and_build(_payload(postalcode=51147)).postal_code == "51147"

    def test_rejects_boolean_text_field(self) -> None:
        with pytest.raises(MalformedResponseError, match="'name'"):
            validate_and_build(_payload(name=True))

    def test_rejects_structured_text_field(self) -> None:
        with pytest.raises(MalformedResponseError, match="'address'"):
            validate_and_build(_payload(address={"street": "x"}))

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("Ja", True), ("1", True), ("no", False), ("nein", False), (None, False)],
    )
    def test_flag_strings(self, raw: object, expected: bool) -> None:
        assert validate_and_build(_payload(signed=raw)).signed is expected

    def test_rejects_unreadable_flag(self) -> None:
        with pytest.raises(MalformedResponseError, match="'handwritten' must be a boolean"):
            validate_and_build(_payload(handwritten="maybe"))

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("bb", "BB"), ("S", "S"), ("XY", "other"), ("other", "other")],
    )
    def test_stamp_codes(self, raw: str, expected: str) -> None:
        assert validate_and_build(_payload(stamp=raw)).stamp == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(150, 100), (-5, 0), (87.6, 88), ("75%", 75), ("60", 60)],
    )
    def test_confidence_is_clamped(self, raw: object, expected: int) -> None:
        assert validate_and_build(_payload(confidence=raw)).confidence == expected

    def test_rejects_unreadable_confidence(self) -> None:
        with pytest.raises(MalformedResponseError, match="confidence"):
            validate_and_build(_payload(confidence="high"))

    @pytest.mark.parametrize("raw", [float("nan"), float("inf"), float("-inf"), "nan", "Infinity"])
    def test_rejects_non_finite_confidence(self, raw: object) -> None:
        with pytest.raises(MalformedResponseError, match="finite"):
            validate_and_build(_payload(confidence=raw))

    def test_invalid_postal_code_warns_and_caps_confidence(self) -> None:
        fields = validate_and_build(_payload(postalcode="5114", confidence=95))

        assert fields.postal_code == "5114"
        assert fields.confidence == LOW_CONFIDENCE_CAP
        assert any("postalcode" in w for w in fields.warnings)

    def test_invalid_postal_code_without_confidence(self) -> None:
        fields = validate_and_build(_payload(postalcode="ABCDE", confidence=None))
        assert fields.confidence == LOW_CONFIDENCE_CAP

    def test_invalid_postal_code_keeps_lower_confidence(self) -> None:
        fields = validate_and_build(_payload(postalcode="1", confidence=30))
        assert fields.confidence == 30

    def test_invalid_dates_and_time_only_warn(self) -> None:
        fields = validate_and_build(
            _payload(birthday="1964-08-12", date="March 1", time="2pm", confidence=80)
        )

        assert fields.birthday == "1964-08-12"
        assert fields.confidence == 80
        assert len(fields.warnings) == 3
