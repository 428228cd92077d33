"""
Plain-text export of a split result.

The same text is used for "copy to clipboard" and "share"; only the
destination differs. Delivering the text is done by callables injected by
the UI layer, so nothing here touches a clipboard or share sheet.
"""

from typing import Callable, Optional

from src.models.split import SplitResult
from src.split.formatting import format_money, format_number


SUMMARY_TITLE = "Bill Split Results"

CopySink = Callable[[str], None]
ShareSink = Callable[[str, str], None]


def build_summary(result: SplitResult, base_symbol: str) -> str:
    """
    Build the summary text for a result.

    Format:
        Bill Split Results:
        Total: <symbol><total>
        Split <N> ways:

        <name>: <symbol><amount to 2 decimals>
        ...
    """
    header = [
        f"{SUMMARY_TITLE}:",
        f"Total: {base_symbol}{format_number(result.total_amount)}",
        f"Split {result.participant_count} ways:",
        "",
    ]
    lines = [
        f"{person.name}: {person.symbol}{format_money(person.amount)}"
        for person in result.people
    ]
    return "\n".join(header + lines)


class SummaryExporter:
    """
    Sends summary text to the clipboard or the native share sheet.

    Args:
        copy: Writes text to the clipboard
        share: Opens the share sheet with (title, text). When None,
               sharing falls back to copying.
    """

    def __init__(self, copy: CopySink, share: Optional[ShareSink] = None):
        self._copy = copy
        self._share = share

    @property
    def can_share(self) -> bool:
        return self._share is not None

    def copy_results(self, result: SplitResult, base_symbol: str) -> str:
        """Copy the summary; returns the text written."""
        text = build_summary(result, base_symbol)
        self._copy(text)
        return text

    def share_results(self, result: SplitResult, base_symbol: str) -> str:
        """Share the summary, or copy it when sharing is unavailable."""
        if self._share is None:
            return self.copy_results(result, base_symbol)

        text = build_summary(result, base_symbol)
        self._share(SUMMARY_TITLE, text)
        return text
