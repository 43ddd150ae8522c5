"""Profile selection by explicit name or the configured default."""
from __future__ import annotations

from typing import List
import logging

from .config_loader import Config, Profile
from .errors import ProfileNotFound


logger = logging.getLogger(__name__)


def available_profiles(config: Config) -> List[str]:
    return config.profile_names()


def resolve(config: Config, requested_name: str | None = None) -> Profile:
    """Return the profile named ``requested_name``, or the default profile.

    Lookup is exact and case-sensitive. When the needed name is missing the
    lookup fails with :class:`ProfileNotFound`; there is no fallback to any
    other profile.
    """

    name = requested_name if requested_name is not None else config.default_profile
    for profile in config.profiles:
        if profile.name == name:
            logger.debug("Resolved profile '%s'", name)
            return profile
    raise ProfileNotFound(name, available_profiles(config))
