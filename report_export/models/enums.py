"""
Enumeration definitions for the report export service.

All enums inherit from both `str` and `Enum` so they serialize cleanly through
Pydantic models and compare equal to their raw database values.

ThemeId and TimeWindow decode permissively: constructing either from an
unrecognized value returns the default member instead of raising ValueError.
This keeps the fallback at the boundary, where it can be tested on its own:

    >>> TimeWindow("rolling-7")
    <TimeWindow.ROLLING_7: 'rolling-7'>
    >>> TimeWindow("last-quarter")
    <TimeWindow.REPORT_WEEK: 'report-week'>
"""

from enum import Enum


class ReportWeekStatus(str, Enum):
    """
    Lifecycle status of a report week.

    Only published weeks may be exported. The draft -> published transition
    is owned by the reporting workflow, not this service.
    """
    DRAFT = "draft"
    PUBLISHED = "published"


class ThemeId(str, Enum):
    """
    Predefined report themes.

    - light: Clean gray palette with the platform blue accent (default)
    - dark: Slate palette for low-light environments
    - blue: Corporate blue palette
    - green: Emerald palette
    """
    LIGHT = "light"
    DARK = "dark"
    BLUE = "blue"
    GREEN = "green"

    @classmethod
    def _missing_(cls, value):
        return cls.LIGHT


class TimeWindow(str, Enum):
    """
    Window used to count new leads in live KPI figures.

    - report-week: Since Monday 00:00 UTC of the current week (default)
    - rolling-7: Since 00:00 UTC seven days ago
    """
    REPORT_WEEK = "report-week"
    ROLLING_7 = "rolling-7"

    @classmethod
    def _missing_(cls, value):
        return cls.REPORT_WEEK


class LeadDimension(str, Enum):
    """
    Dimension types of synced lead metric rows.

    Every lead is stored once per dimension, so totals must be taken over a
    single dimension. STATUS is the one used for lead counts.
    """
    STATUS = "status"
    SOURCE = "source"
