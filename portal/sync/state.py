"""Page-level state shared by the listing renderer and the change poller."""

from dataclasses import dataclass, field

ALL_SECTION_IDS = [1, 2, 3]


@dataclass
class ListingState:
    """Mutable state of one listing page.

    Attributes:
        search_term: Current free-text query ("" shows everything)
        open_sections: Ids of sections rendered expanded
        known_ids: Identifiers seen by the last check (None until primed)
    """

    search_term: str = ""
    open_sections: list[int] = field(default_factory=lambda: list(ALL_SECTION_IDS))
    known_ids: set[str] | None = None

    def is_open(self, section_id: int) -> bool:
        return section_id in self.open_sections

    def toggle(self, section_id: int) -> bool:
        """Flip one section's open state; returns the new state."""
        if section_id in self.open_sections:
            self.open_sections.remove(section_id)
            return False
        self.open_sections.append(section_id)
        return True

    def open_all(self, section_ids: list[int] | None = None) -> None:
        self.open_sections = list(section_ids or ALL_SECTION_IDS)
