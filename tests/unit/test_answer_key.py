"""
Unit tests for template_eval.ingest.answer_key module.
"""

import pytest

from template_eval.constants import HUMAN_TARGET, INSTRUMENT, ORG_PERP
from template_eval.domain.models import MalformedRecordError
from template_eval.ingest.answer_key import AnswerKey
from tests.conftest import ANSWER_KEY_TEXT


class TestAnswerKey:
    """Test answer-key parsing and lookup."""

    def test_stories_in_file_order(self, answer_key):
        assert answer_key.stories() == ["dev-muc3-0001", "dev-muc3-0002"]
        assert len(answer_key) == 2

    def test_empty_template_dropped(self, answer_key):
        assert "DEV-MUC3-0003" not in answer_key
        assert answer_key.get_templates("DEV-MUC3-0003") is None

    def test_lookup_is_case_insensitive(self, answer_key):
        assert answer_key.get_templates("DEV-MUC3-0001") is answer_key.get_templates("dev-muc3-0001")
        assert "Dev-Muc3-0002" in answer_key

    def test_slots(self, answer_key):
        template = answer_key.get_templates("dev-muc3-0001")[0]
        assert template.incident_type == "KIDNAPPING"
        assert template.get(ORG_PERP) == '"FARABUNDO MARTI NATIONAL LIBERATION FRONT" / "FMLN"'
        assert template.get(HUMAN_TARGET) == '"PEASANTS"\n? "CHILDREN"'
        assert template.physical_targets() == []

    def test_entities(self, answer_key):
        template = answer_key.get_templates("dev-muc3-0001")[0]
        perps = template.perpetrators()
        assert [entity.mentions for entity in perps] == [
            ("URBAN GUERRILLAS",),
            ("FARABUNDO MARTI NATIONAL LIBERATION FRONT", "FMLN"),
        ]
        targets = template.human_targets()
        assert [(entity.mentions, entity.optional) for entity in targets] == [
            (("PEASANTS",), False),
            (("CHILDREN",), True),
        ]

    def test_optional_template(self, answer_key):
        template = answer_key.get_templates("dev-muc3-0002")[0]
        assert template.optional
        assert template.instruments()[0].optional

    def test_entity_counts(self, answer_key):
        counts = answer_key.entity_counts()
        assert counts[HUMAN_TARGET] == (2, 1)
        assert counts[ORG_PERP] == (1, 0)
        assert counts[INSTRUMENT] == (1, 1)

    def test_custom_template_types(self, answer_key_lines):
        key = AnswerKey.from_lines(answer_key_lines, template_types=("KIDNAPPING",))
        assert key.template_types == ("KIDNAPPING",)

    def test_from_file(self, tmp_path):
        path = tmp_path / "key-dev-0101.muc4"
        path.write_text(ANSWER_KEY_TEXT, encoding="utf-8")
        assert AnswerKey.from_file(path).stories() == ["dev-muc3-0001", "dev-muc3-0002"]


class TestMalformedAnswerKey:
    """Test answer-key errors."""

    def test_slot_without_value(self):
        lines = ["0.  MESSAGE: ID                     DEV-MUC3-0001 (NCCOSC)", "4.  INCIDENT: TYPE"]
        with pytest.raises(MalformedRecordError, match="Line 2"):
            AnswerKey.from_lines(lines)

    def test_slot_before_message(self):
        with pytest.raises(MalformedRecordError, match="Line 1"):
            AnswerKey.from_lines(["4.  INCIDENT: TYPE                  BOMBING"])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AnswerKey.from_file(tmp_path / "missing.muc4")
