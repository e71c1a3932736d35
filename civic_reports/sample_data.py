"""Example issues shown on first run, when nothing has been reported yet."""

from datetime import datetime, timedelta
from typing import List

from civic_reports.schemas import Issue, iso_timestamp


def sample_issues(now: datetime) -> List[Issue]:
    """Return the four sample issues dated relative to now."""
    return [
        Issue(
            id="1",
            type="pothole",
            description="Large pothole causing traffic issues and potential vehicle damage",
            location="Main Street near City Park",
            priority="high",
            status="in-progress",
            date=iso_timestamp(now - timedelta(days=1)),
            photo="https://images.pexels.com/photos/1006129/pexels-photo-1006129.jpeg?auto=compress&cs=tinysrgb&w=400",
        ),
        Issue(
            id="2",
            type="streetlight",
            description="Streetlight has been flickering for several days, creating safety concerns",
            location="5th Avenue and Oak Street intersection",
            priority="medium",
            status="pending",
            date=iso_timestamp(now - timedelta(days=2)),
            photo=None,
        ),
        Issue(
            id="3",
            type="garbage",
            description="Garbage bins have not been collected for over a week",
            location="Residential area on Elm Street",
            priority="medium",
            status="resolved",
            date=iso_timestamp(now - timedelta(days=3)),
            photo="https://images.pexels.com/photos/3735218/pexels-photo-3735218.jpeg?auto=compress&cs=tinysrgb&w=400",
        ),
        Issue(
            id="4",
            type="water",
            description="Water main break causing flooding in the area",
            location="Downtown Commercial District",
            priority="high",
            status="in-progress",
            date=iso_timestamp(now - timedelta(hours=12)),
            photo=None,
        ),
    ]
