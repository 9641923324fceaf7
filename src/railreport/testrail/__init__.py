"""TestRail API integration."""

from railreport.testrail.client import TestRailClient

__all__ = ["TestRailClient"]
