"""Account-specific field handling for the Claude config document.

The live config is split into two kinds of top-level keys: the fixed set
below, which identifies one logged-in account, and everything else, which
are user preferences that survive a profile switch untouched.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from claudectx.exceptions import ParseFailureError

ACCOUNT_FIELDS: tuple[str, ...] = (
    "oauthAccount",
    "userID",
    "groveConfigCache",
    "cachedChromeExtensionInstalled",
    "subscriptionNoticeCount",
    "s1mAccessCache",
    "recommendedSubscription",
    "hasAvailableSubscription",
)

_ACCOUNT_FIELD_SET: frozenset[str] = frozenset(ACCOUNT_FIELDS)


def is_account_field(key: str) -> bool:
    return key in _ACCOUNT_FIELD_SET


def extract_account_fields(document: object) -> dict[str, Any]:
    """Return a new dict holding only the account fields present in ``document``.

    Keys keep the document's order and values are deep copies. Anything that
    is not a JSON object yields an empty dict.
    """
    if not isinstance(document, dict):
        return {}
    return {
        key: copy.deepcopy(value)
        for key, value in document.items()
        if key in _ACCOUNT_FIELD_SET
    }


def patch_account_fields(live_config: object, profile: object) -> None:
    """Apply ``profile``'s account fields onto ``live_config`` in place.

    Account fields present in the profile overwrite the live value; account
    fields missing from the profile are removed from the live config so no
    identity data from the previous account lingers. Portable keys are never
    read from the profile nor touched in the live config. Non-dict inputs
    make this a no-op.
    """
    if not isinstance(live_config, dict) or not isinstance(profile, dict):
        return
    for key in ACCOUNT_FIELDS:
        if key in profile:
            live_config[key] = copy.deepcopy(profile[key])
        else:
            live_config.pop(key, None)


def account_uuid(document: object) -> str | None:
    """Identity value ``oauthAccount.accountUuid``, or None when absent."""
    if not isinstance(document, dict):
        return None
    account = document.get("oauthAccount")
    if not isinstance(account, dict):
        return None
    value = account.get("accountUuid")
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class OAuthAccount:
    """The ``oauthAccount`` object of a Claude config."""

    account_uuid: str
    email_address: str
    organization_uuid: str
    display_name: str
    organization_role: str
    organization_name: str
    has_extra_usage_enabled: bool
    workspace_role: str | None = None

    @classmethod
    def from_document(cls, document: object, *, source: str = "config") -> OAuthAccount | None:
        """Parse the account of ``document``; None when it has no ``oauthAccount``."""
        if not isinstance(document, dict) or "oauthAccount" not in document:
            return None
        raw = document["oauthAccount"]
        if not isinstance(raw, dict):
            raise ParseFailureError(f"Failed to parse oauthAccount in {source}: expected object")

        def _required_str(key: str) -> str:
            value = raw.get(key)
            if not isinstance(value, str):
                raise ParseFailureError(
                    f"Failed to parse oauthAccount in {source}: missing or invalid {key!r}"
                )
            return value

        extra_usage = raw.get("hasExtraUsageEnabled")
        if not isinstance(extra_usage, bool):
            raise ParseFailureError(
                f"Failed to parse oauthAccount in {source}: "
                "missing or invalid 'hasExtraUsageEnabled'"
            )
        workspace_role = raw.get("workspaceRole")
        if workspace_role is not None and not isinstance(workspace_role, str):
            raise ParseFailureError(
                f"Failed to parse oauthAccount in {source}: invalid 'workspaceRole'"
            )

        return cls(
            account_uuid=_required_str("accountUuid"),
            email_address=_required_str("emailAddress"),
            organization_uuid=_required_str("organizationUuid"),
            display_name=_required_str("displayName"),
            organization_role=_required_str("organizationRole"),
            organization_name=_required_str("organizationName"),
            has_extra_usage_enabled=extra_usage,
            workspace_role=workspace_role,
        )

    @property
    def label(self) -> str:
        return f"{self.display_name} @ {self.organization_name}"
