"""Domain exceptions for identifier resolution and addon registration.

Registration errors carry the user-facing message as their ``str()``.
"""

from __future__ import annotations


class UnresolvableIdentifierError(Exception):
    """Raised when a native id yields no usable external identifier."""

    def __init__(self, native_id: str) -> None:
        super().__init__(f"Could not resolve any external id for {native_id!r}")
        self.native_id = native_id


class AddonRegistrationError(Exception):
    """Base class for errors raised while validating an addon URL."""


class AddonConfigurePageError(AddonRegistrationError):
    """Raised when the user pasted the addon's /configure page."""

    def __init__(self) -> None:
        super().__init__(
            "You pasted a configuration page. Complete setup there and paste "
            "the final Stremio add-on URL that returns a manifest.json."
        )


class AddonUnreachableError(AddonRegistrationError):
    """Raised when a manifest probe failed on timeout or network error."""

    def __init__(self) -> None:
        super().__init__(
            "Couldn't reach the add-on (timeout/network). "
            "Check the URL and try again."
        )


class AddonHttpStatusError(AddonRegistrationError):
    """Raised when the manifest probes answered with 404/403."""

    def __init__(self, status_code: int) -> None:
        super().__init__(
            f"This URL returned {status_code}. Paste the final Stremio add-on "
            "URL (the one that returns manifest.json)."
        )
        self.status_code = status_code


class AddonNotJsonError(AddonRegistrationError):
    """Raised when the probed URL did not return JSON."""

    def __init__(self) -> None:
        super().__init__("That address didn't return a Stremio manifest.json.")


class InvalidManifestError(AddonRegistrationError):
    """Raised when the JSON lacks id/name/version/resources/types."""

    def __init__(self) -> None:
        super().__init__(
            "This doesn't look like a Stremio add-on "
            "(missing id/name/resources/types)."
        )
