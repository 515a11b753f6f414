"""Abstract base class for researchers and the research prompt."""

from abc import ABC, abstractmethod

from scan2meet.models.business_card import ResearchResult


def build_research_prompt(company: str, full_name: str, department: str = "") -> str:
    """Prompt asking for a short markdown briefing on a contact and their company."""
    role = f"{full_name} ({department}, {company})" if department else f"{full_name} ({company})"
    return f"""Research the following and summarize it concisely in markdown.

Company: {company}
Person: {role}

1. Company overview (year founded, headquarters, number of employees)
2. Main lines of business
3. Position within its industry
4. Recent news and developments
5. Public information about {full_name} and their role

Keep it brief. If nothing reliable can be found for an item, say so."""


class Researcher(ABC):
    """Abstract base class for search-grounded researchers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this researcher."""
        ...

    @abstractmethod
    def research(
        self, company: str, full_name: str, department: str = ""
    ) -> ResearchResult:
        """
        Produce a research summary about a contact and their company.

        Raises:
            ResearchError: If the request fails.
        """
        ...
