class InvestmentTrackerError(Exception):
    pass


class MissingReferenceError(InvestmentTrackerError):
    """A row the aggregate graph depends on is not in the database."""


class MissingVehicleError(MissingReferenceError):
    pass


class MissingPortfolioError(MissingReferenceError):
    pass


class AmbiguousResultError(InvestmentTrackerError):
    """A query that must produce exactly one row produced more than one."""


class AlreadyPersistedError(InvestmentTrackerError):
    pass


class InvalidGranularityError(InvestmentTrackerError):
    pass
