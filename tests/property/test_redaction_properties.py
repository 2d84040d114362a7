"""Property-based tests for log redaction.

Property 3: Redaction
- Any key naming a credential is replaced by the redaction marker
- Other keys and scalar values are preserved
- Sanitizing twice equals sanitizing once
"""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from oway_sdk.telemetry import (
    REDACTED,
    SENSITIVE_KEY_FRAGMENTS,
    is_sensitive_key,
    sanitize_for_logging,
)

safe_key_strategy = st.text(
    alphabet=st.sampled_from("bcdfghjlmnqvwxyz0123456789"), min_size=1, max_size=12
)
sensitive_key_strategy = st.builds(
    lambda prefix, fragment, suffix, upper: (
        f"{prefix}{fragment.upper() if upper else fragment}{suffix}"
    ),
    safe_key_strategy,
    st.sampled_from(SENSITIVE_KEY_FRAGMENTS),
    st.sampled_from(["", "_id", "-value"]),
    st.booleans(),
)
scalar_strategy = st.one_of(st.none(), st.integers(), st.text(max_size=20), st.booleans())
json_strategy = st.recursive(
    scalar_strategy,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.one_of(safe_key_strategy, sensitive_key_strategy), children, max_size=4),
    ),
    max_leaves=20,
)


def _contains_sensitive_value(obj: Any) -> bool:
    if isinstance(obj, dict):
        return any(
            (is_sensitive_key(k) and v != REDACTED) or _contains_sensitive_value(v)
            for k, v in obj.items()
        )
    if isinstance(obj, list):
        return any(_contains_sensitive_value(item) for item in obj)
    return False


class TestRedaction:
    """Property tests for sanitize_for_logging."""

    @given(key=sensitive_key_strategy, value=scalar_strategy)
    @settings(max_examples=100)
    def test_sensitive_keys_are_redacted(self, key: str, value: Any) -> None:
        """Property: credential keys never keep their value."""
        assert sanitize_for_logging({key: value}) == {key: REDACTED}

    @given(key=safe_key_strategy, value=scalar_strategy)
    @settings(max_examples=100)
    def test_safe_keys_are_preserved(self, key: str, value: Any) -> None:
        """Property: other keys keep their value."""
        assert sanitize_for_logging({key: value}) == {key: value}

    @given(data=json_strategy)
    @settings(max_examples=100)
    def test_no_sensitive_value_survives(self, data: Any) -> None:
        """Property: no credential value remains at any depth."""
        assert not _contains_sensitive_value(sanitize_for_logging(data))

    @given(data=json_strategy)
    @settings(max_examples=100)
    def test_idempotent(self, data: Any) -> None:
        """Property: sanitizing twice equals sanitizing once."""
        once = sanitize_for_logging(data)

        assert sanitize_for_logging(once) == once
