"""Interactive UI components for picking group members."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

logger = logging.getLogger(__name__)


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="crl" matches "carol"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


class MemberCompleter(Completer):
    """Fuzzy search completer over a group roster."""

    def __init__(self, members: list[str]):
        """Initialize the completer with the group's members."""
        self.members = members

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for member in self.members:
            if not query or fuzzy_match(query, member.lower()):
                yield Completion(
                    text=member,
                    start_position=-len(document.text),
                    display=member,
                )


def select_member_interactive(members: list[str], prompt: str = "Payer") -> str | None:
    """
    Prompt for one roster member with fuzzy completion.

    Args:
        members: The group roster
        prompt: Label shown before the input

    Returns:
        Selected member, or None if the user skipped
    """
    print(f"\n👥 Members: {', '.join(members)}")
    print("   Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    session: PromptSession[str] = PromptSession(completer=MemberCompleter(members))

    try:
        while True:
            result = session.prompt(f"{prompt}: ", complete_while_typing=True)

            if not result:
                return None

            if result in members:
                logger.info(f"User selected member: {result}")
                return result

            print("❌ Not a member of this group. Press Tab to complete.")

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return None
    except EOFError:
        return None
