"""
Search-mode resolution.

Turns a (search, value, page, size) request into either a paged filter
against the message store or an identity lookup, rejecting malformed
combinations before anything reaches the store.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from bulletin.core.exceptions import ValidationError
from bulletin.db.store import MessageFilter, PageRequest
from bulletin.services.validation import is_blank, validate_email, validate_paging


class SearchMode(str, enum.Enum):
    """Named search modes accepted by the list endpoint."""
    ALL = "all"
    BY_RECIPIENT = "byRecipient"
    BY_SENDER = "bySender"
    BY_ID = "byId"
    BY_URGENT = "byUrgent"
    URGENT_ONLY_BY_RECIPIENT = "urgentOnlyByRecipient"
    URGENT_ONLY_BY_SENDER = "urgentOnlyBySender"


@dataclass(frozen=True)
class ModeRule:
    requires_value: bool = False
    email_field: Optional[str] = None  # "target" or "sender"
    urgent_only: bool = False


# Name used in error messages for the email carried in `value`
VALUE_NAMES = {"target": "recipientEmail", "sender": "senderEmail"}

MODE_RULES = {
    SearchMode.ALL: ModeRule(),
    SearchMode.BY_RECIPIENT: ModeRule(requires_value=True, email_field="target"),
    SearchMode.BY_SENDER: ModeRule(requires_value=True, email_field="sender"),
    SearchMode.BY_ID: ModeRule(requires_value=True),
    SearchMode.BY_URGENT: ModeRule(urgent_only=True),
    SearchMode.URGENT_ONLY_BY_RECIPIENT: ModeRule(
        requires_value=True, email_field="target", urgent_only=True
    ),
    SearchMode.URGENT_ONLY_BY_SENDER: ModeRule(
        requires_value=True, email_field="sender", urgent_only=True
    ),
}


@dataclass(frozen=True)
class ResolvedQuery:
    """Either a paged filter or a single-message lookup (message_id set)."""
    mode: SearchMode
    message_filter: Optional[MessageFilter] = None
    page_request: Optional[PageRequest] = None
    message_id: Optional[str] = None

    @property
    def is_lookup(self) -> bool:
        return self.message_id is not None


def parse_search_mode(search: Optional[str], value: Optional[str]) -> SearchMode:
    """
    Map the raw search parameter to a SearchMode.

    No search at all means "list everything", but only when no value is
    given either; a value without a search mode is ambiguous and rejected.
    """
    if is_blank(search):
        if not is_blank(value):
            raise ValidationError("Unsupported inputs")
        return SearchMode.ALL

    try:
        mode = SearchMode(search.strip())
    except ValueError:
        raise ValidationError("Unsupported inputs") from None

    # "all" is internal; clients express it by omitting search
    if mode is SearchMode.ALL:
        raise ValidationError("Unsupported inputs")
    return mode


def resolve_query(
    mode: SearchMode,
    value: Optional[str] = None,
    page: Optional[int] = None,
    size: Optional[int] = None
) -> ResolvedQuery:
    """Validate the inputs for a search mode and build the store query."""
    rule = MODE_RULES[mode]

    if rule.requires_value and is_blank(value):
        raise ValidationError(f"value is required for search mode '{mode.value}'")

    if mode is SearchMode.BY_ID:
        return ResolvedQuery(mode=mode, message_id=value)

    page_request = validate_paging(page, size)

    criteria = {}
    if rule.email_field:
        criteria[rule.email_field] = validate_email(VALUE_NAMES[rule.email_field], value)

    return ResolvedQuery(
        mode=mode,
        message_filter=MessageFilter(urgent_only=rule.urgent_only, **criteria),
        page_request=page_request,
    )


def resolve_search(
    search: Optional[str],
    value: Optional[str] = None,
    page: Optional[int] = None,
    size: Optional[int] = None
) -> ResolvedQuery:
    return resolve_query(parse_search_mode(search, value), value, page, size)
