"""Product vertical to team mapping.

Each dashboard tab shows one product vertical; a vertical owns a fixed set
of team labels. Tables are frozen when built and shared read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence


def build_vertical_teams(
    mapping: Mapping[str, Sequence[str]],
) -> Mapping[str, tuple[str, ...]]:
    """Freeze a vertical -> teams mapping into a read-only table.

    Args:
        mapping: Vertical ID to team labels.

    Returns:
        Read-only mapping of vertical ID to a tuple of team labels.
    """
    return MappingProxyType({vertical: tuple(teams) for vertical, teams in mapping.items()})


DEFAULT_VERTICAL_TEAMS = build_vertical_teams({
    "lottery": ("สาวอ้อย", "อลิน", "อัญญาC", "อัญญาD"),
    "baccarat": ("สเปชบาร์", "บาล้าน"),
    "horse-racing": (),
    "football-area": ("ฟุตบอลแอร์เรีย", "ฟุตบอลแอร์เรีย(ฮารุ)"),
})

VERTICAL_TEAMS = DEFAULT_VERTICAL_TEAMS


def teams_for_vertical(
    vertical: str,
    table: Mapping[str, tuple[str, ...]] = VERTICAL_TEAMS,
) -> tuple[str, ...]:
    """Return the team labels of a vertical (empty for unknown verticals)."""
    return table.get(vertical, ())
