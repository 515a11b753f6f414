"""Research state for one card on screen."""

import logging

from scan2meet.errors import format_error
from scan2meet.models.business_card import BusinessCardData, ResearchState
from scan2meet.research.base import Researcher

logger = logging.getLogger(__name__)


class ResearchSession:
    """Runs at most one research request at a time and keeps its outcome."""

    def __init__(self, researcher: Researcher):
        self._researcher = researcher
        self._state = ResearchState.idle()

    @property
    def state(self) -> ResearchState:
        return self._state

    def can_research(self, card: BusinessCardData) -> bool:
        return bool(card.company and card.full_name) and not self._state.is_loading

    def execute(self, card: BusinessCardData) -> ResearchState:
        """Research the card's person and company, replacing any earlier result.

        Does nothing when the card lacks a company or a name, or while a
        request is already in flight.
        """
        if not self.can_research(card):
            return self._state

        self._state = ResearchState.loading()
        try:
            result = self._researcher.research(
                card.company, card.full_name, card.department
            )
        except Exception as e:
            logger.exception("Research failed for %s", card.company)
            self._state = ResearchState.failed(f"Research failed:\n{format_error(e)}")
        else:
            self._state = ResearchState.loaded(result)
        return self._state

    def reset(self) -> None:
        self._state = ResearchState.idle()
