"""Download eligibility for a reading session."""
from dataclasses import dataclass


@dataclass(frozen=True)
class DownloadDecision:
    can_download: bool
    completed_pages: int
    total_pages: int
    reason: str


def can_download(session) -> DownloadDecision:
    """Every page must be completed individually; read-only."""
    completed = sum(1 for p in session.pages if p.is_completed)
    total = session.total_pages
    if completed >= total:
        return DownloadDecision(True, completed, total, "All pages completed")
    remaining = total - completed
    return DownloadDecision(
        False,
        completed,
        total,
        f"Complete {remaining} more page(s) to download ({completed} of {total} pages completed)",
    )
