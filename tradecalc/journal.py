"""Trade journal with notes, reasoning and psychological sentiment tags."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Union


class SentimentTag(Enum):
    """Psychological factors behind a trade."""

    NEUTRAL = "NEUTRAL"
    FOMO = "FOMO"
    REVENGE = "REVENGE"
    OVERCONFIDENT = "OVERCONFIDENT"
    HESITANT = "HESITANT"
    DISCIPLINED = "DISCIPLINED"
    IMPULSIVE = "IMPULSIVE"
    PATIENT = "PATIENT"


def sentiment_tag_to_string(tag: SentimentTag) -> str:
    return tag.value


def string_to_sentiment_tag(text: str) -> SentimentTag:
    """Parse a tag name; unknown names map to NEUTRAL."""
    try:
        return SentimentTag(text)
    except ValueError:
        return SentimentTag.NEUTRAL


@dataclass
class JournalEntry:
    """A journal entry attached to one trade."""

    trade_id: str = ""
    notes: str = ""
    setup_reasoning: str = ""
    sentiment_tags: list[SentimentTag] = field(default_factory=list)
    lesson_learned: str = ""
    market_conditions: str = ""
    timestamp: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["sentiment_tags"] = [sentiment_tag_to_string(t) for t in self.sentiment_tags]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "JournalEntry":
        return cls(
            trade_id=str(data["trade_id"]),
            notes=data.get("notes", ""),
            setup_reasoning=data.get("setup_reasoning", ""),
            sentiment_tags=[string_to_sentiment_tag(t) for t in data.get("sentiment_tags", [])],
            lesson_learned=data.get("lesson_learned", ""),
            market_conditions=data.get("market_conditions", ""),
            timestamp=data.get("timestamp", 0.0),
        )


def _escape_csv(text: str) -> str:
    escaped = text.replace('"', '""')
    if any(ch in escaped for ch in ',\n"'):
        escaped = f'"{escaped}"'
    return escaped


class TradeJournal:
    """Journal entries keyed by trade id."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: dict[str, JournalEntry] = {}
        self._clock = clock

    def _require(self, trade_id: str) -> JournalEntry:
        try:
            return self._entries[trade_id]
        except KeyError:
            raise KeyError(f"no journal entry for trade {trade_id!r}") from None

    def add_entry(
        self,
        trade_id: str,
        notes: str,
        setup_reasoning: str = "",
        sentiment_tags: Optional[Iterable[SentimentTag]] = None,
    ) -> JournalEntry:
        """Create or replace the entry for ``trade_id``."""
        entry = JournalEntry(
            trade_id=trade_id,
            notes=notes,
            setup_reasoning=setup_reasoning,
            sentiment_tags=list(sentiment_tags or []),
            timestamp=int(self._clock()),
        )
        self._entries[trade_id] = entry
        return entry

    def update_entry(self, trade_id: str, notes: str, setup_reasoning: str = "") -> None:
        """Replace notes; reasoning is replaced only when given."""
        entry = self._require(trade_id)
        entry.notes = notes
        if setup_reasoning:
            entry.setup_reasoning = setup_reasoning

    def add_sentiment_tag(self, trade_id: str, tag: SentimentTag) -> None:
        entry = self._require(trade_id)
        if tag not in entry.sentiment_tags:
            entry.sentiment_tags.append(tag)

    def remove_sentiment_tag(self, trade_id: str, tag: SentimentTag) -> bool:
        """Remove a tag; return whether it was present."""
        entry = self._require(trade_id)
        if tag in entry.sentiment_tags:
            entry.sentiment_tags.remove(tag)
            return True
        return False

    def add_lesson_learned(self, trade_id: str, lesson: str) -> None:
        self._require(trade_id).lesson_learned = lesson

    def get_entry(self, trade_id: str) -> Optional[JournalEntry]:
        return self._entries.get(trade_id)

    @staticmethod
    def _newest_first(entries: Iterable[JournalEntry]) -> list[JournalEntry]:
        ordered = sorted(entries, key=lambda e: e.trade_id)
        return sorted(ordered, key=lambda e: e.timestamp, reverse=True)

    def all_entries(self) -> list[JournalEntry]:
        """All entries, newest first."""
        return self._newest_first(self._entries.values())

    def entries_by_tag(self, tag: SentimentTag) -> list[JournalEntry]:
        """Entries carrying ``tag``, newest first."""
        return self._newest_first(e for e in self._entries.values() if tag in e.sentiment_tags)

    def __contains__(self, trade_id: object) -> bool:
        return trade_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def export_csv(self, filename: Union[str, Path]) -> None:
        """Write all entries, newest first, as CSV."""
        with open(filename, "w", newline="", encoding="utf-8") as handle:
            handle.write("TradeID,Timestamp,Notes,Setup Reasoning,Sentiment Tags,Lesson Learned\n")
            for entry in self.all_entries():
                stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(entry.timestamp))
                tags = "; ".join(sentiment_tag_to_string(t) for t in entry.sentiment_tags)
                fields = [
                    entry.trade_id,
                    stamp,
                    _escape_csv(entry.notes),
                    _escape_csv(entry.setup_reasoning),
                    _escape_csv(tags),
                    _escape_csv(entry.lesson_learned),
                ]
                handle.write(",".join(fields) + "\n")

    def export_json(self, filename: Union[str, Path]) -> None:
        """Write all entries, newest first, as a JSON array."""
        data = [entry.to_dict() for entry in self.all_entries()]
        with open(filename, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=4)

    def import_json(self, filename: Union[str, Path]) -> int:
        """Merge entries from a JSON file; return how many were read."""
        with open(filename, encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, list):
            raise ValueError("journal JSON must be an array of entries")
        entries = [JournalEntry.from_dict(item) for item in data]
        for entry in entries:
            self._entries[entry.trade_id] = entry
        return len(entries)