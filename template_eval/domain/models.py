"""
Data models for clusters and gold templates.

ScoredCluster is the unit every alignment, interpolation and selection step
works on. GoldEntity and GoldTemplate wrap the hand-annotated answer key.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from template_eval.constants import (
    HUMAN_TARGET_SLOTS,
    INCIDENT_TYPE,
    INSTRUMENT_SLOTS,
    MAX_SERIALIZED_TOKENS,
    MESSAGE_TEMPLATE,
    PERP_SLOTS,
    PHYS_TARGET_SLOTS,
)

_MENTION_SPLIT = re.compile(r"[:/]+")
_OPTIONAL_LINE = re.compile(r"^\s*\?.+$")


class MalformedRecordError(ValueError):
    """A run-log or cluster record that does not follow the record grammar."""


@dataclass
class ScoredCluster:
    """
    A scored bag of tokens with an id and an overall score.

    The token order (descending token score) is derived and recomputed every
    time the token scores change.
    """

    id: int
    score: float = 0.0
    token_scores: dict[str, float] = field(default_factory=dict)
    ordered_tokens: list[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Never share the caller's dict
        self.token_scores = dict(self.token_scores)
        self._reorder()

    def _reorder(self) -> None:
        ranked = sorted(self.token_scores.items(), key=lambda item: (-item[1], item[0]))
        self.ordered_tokens = [token for token, _ in ranked]

    def set_token_score(self, token: str, score: float) -> None:
        """Set one token's score and re-sort the token order."""
        self.token_scores[token] = score
        self._reorder()

    def remove_token(self, token: str) -> None:
        """Drop a token (no-op if absent) and re-sort the token order."""
        if self.token_scores.pop(token, None) is not None:
            self._reorder()

    def token_score(self, token: str) -> float:
        return self.token_scores.get(token, 0.0)

    def __contains__(self, token: str) -> bool:
        return token in self.token_scores

    @property
    def size(self) -> int:
        return len(self.token_scores)

    def dot(self, other: ScoredCluster) -> float:
        """Unnormalized dot product over shared tokens."""
        total = 0.0
        for token in self.ordered_tokens:
            total += self.token_scores[token] * other.token_score(token)
        return total

    def with_score(self, score: float) -> ScoredCluster:
        """Clone this cluster with a new overall score."""
        return ScoredCluster(id=self.id, score=score, token_scores=self.token_scores)

    def to_record(self, max_tokens: int = MAX_SERIALIZED_TOKENS) -> str:
        """
        Serialize to the run-log record form.

        Example:
            id=24 score=0.0251 [ kidnap 0.31 release 0.2 ... ]

        Only the first max_tokens pairs (by token order) are written; a
        trailing "..." marks truncation.
        """
        record = f"id={self.id} score={float(self.score)!r}"
        if not self.token_scores:
            return record + " [ ]"

        pairs = [
            f"{token} {float(self.token_scores[token])!r}"
            for token in self.ordered_tokens[:max_tokens]
        ]
        if len(self.ordered_tokens) > max_tokens:
            pairs.append("...")
        return record + " [ " + " ".join(pairs) + " ]"

    @classmethod
    def from_record(cls, text: str) -> ScoredCluster:
        """
        Parse a record written by to_record().

        Raises:
            MalformedRecordError: If the id, score or any token pair can't be parsed
        """
        cluster_id = _field_value(text, "id=", int)
        score = _field_value(text, "score=", float)

        bracket = text.find("[", text.find("score="))
        if bracket == -1:
            raise MalformedRecordError(f"Missing token list in cluster record: {text!r}")

        token_scores: dict[str, float] = {}
        parts = text[bracket + 1 :].split()
        i = 0
        while i < len(parts):
            token = parts[i]
            if token in ("...", "]"):
                break
            if i + 1 >= len(parts):
                raise MalformedRecordError(f"Token {token!r} has no score in record: {text!r}")
            try:
                token_scores[token] = float(parts[i + 1])
            except ValueError as e:
                raise MalformedRecordError(
                    f"Bad score for token {token!r} in record: {text!r}"
                ) from e
            i += 2

        return cls(id=cluster_id, score=score, token_scores=token_scores)


def _field_value(text: str, key: str, convert):
    start = text.find(key)
    if start == -1:
        raise MalformedRecordError(f"Missing {key!r} in cluster record: {text!r}")
    start += len(key)
    end = text.find(" ", start)
    raw = text[start:] if end == -1 else text[start:end]
    try:
        return convert(raw)
    except ValueError as e:
        raise MalformedRecordError(f"Bad {key!r} value {raw!r} in record: {text!r}") from e


def sort_key(cluster: ScoredCluster) -> float:
    """Sort key for descending cluster score."""
    return -cluster.score


@dataclass(frozen=True, eq=False)
class GoldEntity:
    """
    A hand-annotated entity with one or more textual mentions.

    Two entities are equal when their mention sets are equal; type, slot and
    the optional flag don't take part in equality.
    """

    template_type: str | None
    mentions: tuple[str, ...]
    slot: str | None = None
    optional: bool = False

    def __post_init__(self):
        if not self.mentions:
            raise ValueError("GoldEntity needs at least one mention")

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GoldEntity):
            return NotImplemented
        return frozenset(self.mentions) == frozenset(other.mentions)

    def __hash__(self):
        return hash(frozenset(self.mentions))

    def __str__(self):
        text = " -- ".join(self.mentions)
        return text + "(opt)" if self.optional else text


def clean_mention(value: str) -> str:
    """Strip annotator marks, whitespace and enclosing quotes from a mention."""
    value = value.replace("?", " ").strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]
    return value.replace('\\"', '"')


@dataclass
class GoldTemplate:
    """
    One answer-key template: slot name to raw (possibly multi-line) value.

    MUC slot values look like "X / Y / Z" or "X: Y" on each line, where each
    line is one entity and the separated parts are its alternative mentions.
    """

    slots: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.slots.get(key)

    def put(self, key: str, value: str) -> None:
        self.slots[key] = value

    def append(self, key: str, value: str) -> None:
        """Append a continuation line to a slot, newline separated."""
        current = self.slots.get(key)
        self.slots[key] = value if current is None else f"{current}\n{value}"

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def incident_type(self) -> str | None:
        return self.slots.get(INCIDENT_TYPE)

    @property
    def optional(self) -> bool:
        message = self.slots.get(MESSAGE_TEMPLATE)
        return message is not None and "OPTIONAL" in message

    def matches_type(self, template_type: str) -> bool:
        incident = self.incident_type
        return incident is not None and incident.startswith(template_type)

    def entities_for(self, slot_keys: Iterable[str]) -> list[GoldEntity]:
        """Split the given slots into de-duplicated entities."""
        entities: list[GoldEntity] = []
        template_optional = self.optional
        for key in slot_keys:
            value = self.slots.get(key)
            if value is None:
                continue
            for line in value.split("\n"):
                mentions = tuple(
                    mention
                    for mention in (clean_mention(part) for part in _MENTION_SPLIT.split(line))
                    if mention
                )
                if not mentions:
                    continue
                entity = GoldEntity(
                    template_type=self.incident_type,
                    mentions=mentions,
                    slot=key,
                    optional=template_optional or bool(_OPTIONAL_LINE.match(line)),
                )
                if entity not in entities:
                    entities.append(entity)
        return entities

    def perpetrators(self) -> list[GoldEntity]:
        return self.entities_for(PERP_SLOTS)

    def human_targets(self) -> list[GoldEntity]:
        return self.entities_for(HUMAN_TARGET_SLOTS)

    def physical_targets(self) -> list[GoldEntity]:
        return self.entities_for(PHYS_TARGET_SLOTS)

    def instruments(self) -> list[GoldEntity]:
        return self.entities_for(INSTRUMENT_SLOTS)

    def main_entities(self) -> list[GoldEntity]:
        return (
            self.perpetrators()
            + self.human_targets()
            + self.physical_targets()
            + self.instruments()
        )

    def slot_entities(self, index: int) -> list[GoldEntity]:
        """Entities of one semantic slot: 0=perp, 1=human target, 2=physical target, 3=instrument."""
        accessors = (
            self.perpetrators,
            self.human_targets,
            self.physical_targets,
            self.instruments,
        )
        if not 0 <= index < len(accessors):
            raise ValueError(f"Slot index must be 0-{len(accessors) - 1}, got {index}")
        return accessors[index]()


def templates_of_type(
    template_type: str, templates: Sequence[GoldTemplate] | None
) -> list[GoldTemplate]:
    """Templates whose incident type starts with template_type."""
    if not templates:
        return []
    return [template for template in templates if template.matches_type(template_type)]


def gold_entities(templates: Iterable[GoldTemplate] | None) -> list[GoldEntity]:
    """Union of the main entities of all templates, first occurrence wins."""
    entities: list[GoldEntity] = []
    for template in templates or ():
        for entity in template.main_entities():
            if entity not in entities:
                entities.append(entity)
    return entities
