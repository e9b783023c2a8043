"""
Domain service: popup selection state for the concession map.

A selection is a tagged value rather than two independent nullable
fields:

    NoSelection | Hover(record) | Pinned(record, hover)

A pinned popup may coexist with a hover popup for another feature, but
there is never more than one of each. Transitions are pure; a None record
(the feature had no usable position) leaves the selection unchanged so
the interaction is silently ignored.

This is client-held state for presentation layers; no route serves it.
"""
from dataclasses import dataclass
from typing import Optional, Union

from concession_map.domain.models import DisplayRecord


@dataclass(frozen=True)
class NoSelection:
    pass


@dataclass(frozen=True)
class Hover:
    record: DisplayRecord


@dataclass(frozen=True)
class Pinned:
    record: DisplayRecord
    hover: Optional[DisplayRecord] = None


Selection = Union[NoSelection, Hover, Pinned]


def hover(selection: Selection, record: Optional[DisplayRecord]) -> Selection:
    """Pointer entered a feature."""
    if record is None:
        return selection
    if isinstance(selection, Pinned):
        return Pinned(record=selection.record, hover=record)
    return Hover(record=record)


def leave(selection: Selection) -> Selection:
    """Pointer left the hovered feature; a pinned popup stays open."""
    if isinstance(selection, Pinned):
        return Pinned(record=selection.record)
    return NoSelection()


def pin(selection: Selection, record: Optional[DisplayRecord]) -> Selection:
    """Feature clicked; replaces any previously pinned popup."""
    if record is None:
        return selection
    current_hover = None
    if isinstance(selection, Hover):
        current_hover = selection.record
    elif isinstance(selection, Pinned):
        current_hover = selection.hover
    return Pinned(record=record, hover=current_hover)


def dismiss(selection: Selection) -> Selection:
    """Pinned popup closed by the user."""
    if not isinstance(selection, Pinned):
        return selection
    if selection.hover is not None:
        return Hover(record=selection.hover)
    return NoSelection()


def visible_records(selection: Selection) -> list[DisplayRecord]:
    """Records that currently have an open popup, pinned first."""
    if isinstance(selection, Hover):
        return [selection.record]
    if isinstance(selection, Pinned):
        return [r for r in (selection.record, selection.hover) if r is not None]
    return []
