"""Add-on group rule checks for new order lines."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pos_terminal.services.errors import ValidationError


@dataclass(frozen=True)
class GroupRule:
    id: int
    name: str
    is_required: bool
    max_select: int | None


@dataclass(frozen=True)
class SelectedAddon:
    addon_id: int
    group_id: int
    qty: int = 1


def validate_selection(groups: Sequence[GroupRule], selection: Iterable[SelectedAddon]) -> list[SelectedAddon]:
    """Check a selection against its groups and return it without zero-qty entries.

    Groups are checked in order and the first failing rule is reported: a
    required group with nothing selected, then a bounded group selected past
    its ``max_select``.
    """
    kept: list[SelectedAddon] = []
    for entry in selection:
        if entry.qty < 0:
            raise ValidationError("add-on quantity cannot be negative", addon_id=entry.addon_id)
        if entry.qty == 0:
            continue
        kept.append(entry)

    known_groups = {group.id for group in groups}
    for entry in kept:
        if entry.group_id not in known_groups:
            raise ValidationError("add-on does not belong to this item", addon_id=entry.addon_id, group_id=entry.group_id)

    counts: dict[int, int] = {}
    for entry in kept:
        counts[entry.group_id] = counts.get(entry.group_id, 0) + entry.qty

    for group in groups:
        selected_count = counts.get(group.id, 0)
        if group.is_required and selected_count == 0:
            raise ValidationError(
                f'add-on group "{group.name}" is required',
                group_id=group.id,
                group_name=group.name,
                is_required=True,
                max_select=group.max_select,
                selected_count=selected_count,
            )
        if group.max_select and group.max_select > 0 and selected_count > group.max_select:
            raise ValidationError(
                f'add-on group "{group.name}" allows at most {group.max_select} selection(s), got {selected_count}',
                group_id=group.id,
                group_name=group.name,
                is_required=group.is_required,
                max_select=group.max_select,
                selected_count=selected_count,
            )
    return kept
