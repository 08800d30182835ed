"""Application constants to avoid magic strings."""


class AmfiFeed:
    """Layout of the AMFI NAVAll.txt feed.

    Data rows look like:
        Scheme Code;ISIN Div Payout/ ISIN Growth;ISIN Div Reinvestment;Scheme Name;Net Asset Value;Date
    """

    FIELD_SEPARATOR = ";"
    MIN_FIELDS = 5

    SCHEME_CODE = 0
    SCHEME_NAME = 3
    NAV = 4
    DATE = 5


class TriggerSource:
    """Where a NAV pipeline run was started from."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"


NAV_RUN_LOCK_NAME = "nav_ingestion"
