"""Custom exceptions for tabsplit."""


class TabSplitError(Exception):
    """Base exception for all tabsplit errors.

    Every subclass carries a short ``code`` used by the adapters to report
    the failure as a tagged result.
    """

    code = "error"


class ConfigurationError(TabSplitError):
    """Raised when configuration is invalid or missing."""

    code = "configuration_error"


class InvalidInputError(TabSplitError):
    """Raised when a required field is empty or malformed."""

    code = "invalid_input"


class DuplicateGroupError(TabSplitError):
    """Raised when creating a group whose name is already taken."""

    code = "duplicate_group"

    def __init__(self, group_name: str, message: str | None = None):
        self.group_name = group_name
        super().__init__(message or f"Group '{group_name}' already exists")


class GroupNotFoundError(TabSplitError):
    """Raised when a group name is not in the store."""

    code = "group_not_found"

    def __init__(self, group_name: str, message: str | None = None):
        self.group_name = group_name
        super().__init__(message or f"Group '{group_name}' not found")


class ExpenseNotFoundError(TabSplitError):
    """Raised when an expense id does not exist in a group."""

    code = "expense_not_found"

    def __init__(self, group_name: str, expense_id, message: str | None = None):
        self.group_name = group_name
        self.expense_id = expense_id
        super().__init__(
            message or f"Expense {expense_id} not found in group '{group_name}'"
        )


class InvalidMembersError(TabSplitError):
    """Raised when an expense has no members or names someone outside the roster."""

    code = "invalid_members"


class ShareParseError(TabSplitError):
    """Raised when a share token is not a finite number."""

    code = "share_parse_error"

    def __init__(self, token: str, message: str | None = None):
        self.token = token
        super().__init__(message or f"Invalid share value: '{token}'")


class ShareCountMismatchError(TabSplitError):
    """Raised when the number of shares differs from the number of members."""

    code = "share_count_mismatch"

    def __init__(self, share_count: int, member_count: int):
        self.share_count = share_count
        self.member_count = member_count
        super().__init__(
            f"Got {share_count} shares for {member_count} members"
        )
