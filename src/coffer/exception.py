from typing import Optional


class CofferError(Exception):
    ...


class MissingSQL(CofferError):
    ...


class ConnectionError(CofferError):
    """A connection or transaction could not be obtained from the pool"""


class AccessorError(CofferError):
    """A single statement run by an accessor failed"""


class RecordNotFound(AccessorError):
    ...


class CommitError(CofferError):
    """The database rejected the commit

    Args:
        message (str): Description of the failure
        rollback_error (BaseException, optional): Failure of the rollback
            attempted after the rejected commit. Defaults to `None`.
    """

    def __init__(
        self, message: str, rollback_error: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        self.rollback_error = rollback_error


class TransactionError(CofferError):
    """Rolling back a failed unit of work also failed

    Both failures are kept: `cause` is what made the unit of work fail and
    `rollback_error` is why the rollback did not go through.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        rollback_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.rollback_error = rollback_error


class TransactionTimeoutError(TransactionError):
    ...
