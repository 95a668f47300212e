"""
MUC-4 answer key reader.

Key files hold one numbered block per template:

    0.  MESSAGE: ID                     DEV-MUC3-0001 (NCCOSC)
    1.  MESSAGE: TEMPLATE               1
    4.  INCIDENT: TYPE                  KIDNAPPING
    9.  PERP: INDIVIDUAL ID             "GUERRILLAS"
                                        "URBAN GUERRILLAS"
    19. HUM TGT: DESCRIPTION            "PEASANTS"

Slot name and value are separated by two or more spaces. Indented lines
continue the previous slot. "*" and "-" mark an empty slot.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from template_eval.constants import EMPTY_SLOT_VALUES, MUC_TYPES
from template_eval.domain.models import GoldTemplate, MalformedRecordError

logger = logging.getLogger(__name__)

MESSAGE_LINE = re.compile(r"^0\..*MESSAGE: ID.*")
SLOT_LINE = re.compile(r"^\d+\.\s+.+")
CONTINUATION_LINE = re.compile(r"^\s+\S.*")
SLOT_SEPARATOR = re.compile(r"\s\s+")


class AnswerKey:
    """Gold templates indexed by (lower-cased) story key."""

    def __init__(self, template_types: Sequence[str] = MUC_TYPES):
        self.template_types = tuple(template_types)
        self._templates: dict[str, list[GoldTemplate]] = {}

    @classmethod
    def from_file(cls, path: Path, template_types: Sequence[str] = MUC_TYPES) -> AnswerKey:
        """
        Read an answer key file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MalformedRecordError: If a numbered slot line has no value
        """
        logger.info(f"Reading answer key: {path}")
        with open(path, encoding="utf-8") as f:
            key = cls.from_lines(f, template_types)
        logger.info(f"Read templates for {len(key)} stories from {path.name}")
        return key

    @classmethod
    def from_lines(cls, lines: Iterable[str], template_types: Sequence[str] = MUC_TYPES) -> AnswerKey:
        key = cls(template_types)
        story: str | None = None
        template: GoldTemplate | None = None
        previous_slot: str | None = None

        for number, raw in enumerate(lines, start=1):
            line = raw.rstrip()

            if MESSAGE_LINE.match(line):
                if story is not None and len(template) > 0:
                    key.add_template(story, template)
                parts = line.split()
                if len(parts) < 4:
                    raise MalformedRecordError(f"Line {number}: message line has no story id")
                story = parts[3]
                template = GoldTemplate()
                previous_slot = None

            elif SLOT_LINE.match(line):
                if template is None:
                    raise MalformedRecordError(f"Line {number}: slot before any MESSAGE: ID line")
                parts = SLOT_SEPARATOR.split(line[4:].strip(), maxsplit=1)
                if len(parts) < 2:
                    raise MalformedRecordError(f"Line {number}: slot has no value ({line!r})")
                slot, value = parts
                if value in EMPTY_SLOT_VALUES:
                    previous_slot = None
                else:
                    template.put(slot, value)
                    previous_slot = slot

            elif previous_slot is not None and CONTINUATION_LINE.match(line):
                template.append(previous_slot, line.strip())

        if story is not None and len(template) > 0:
            key.add_template(story, template)
        return key

    def add_template(self, story: str, template: GoldTemplate) -> None:
        self._templates.setdefault(story.lower(), []).append(template)

    def get_templates(self, story: str) -> list[GoldTemplate] | None:
        """Templates of a story (case-insensitive), None if the story has no key."""
        return self._templates.get(story.lower())

    def stories(self) -> list[str]:
        """Lower-cased story keys in file order."""
        return list(self._templates)

    def __contains__(self, story: str) -> bool:
        return story.lower() in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def entity_counts(self) -> dict[str, tuple[int, int]]:
        """
        Count gold entities per slot.

        Returns:
            slot -> (entities, of which optional); also logged at INFO
        """
        counts: dict[str, list[int]] = {}
        for templates in self._templates.values():
            for template in templates:
                for entity in template.main_entities():
                    entry = counts.setdefault(entity.slot, [0, 0])
                    entry[0] += 1
                    if entity.optional:
                        entry[1] += 1

        logger.info("Answer key entities by slot:")
        for slot, (total, optional) in counts.items():
            logger.info(f"  {slot}: {total} (including {optional} optional)")
        return {slot: (total, optional) for slot, (total, optional) in counts.items()}
