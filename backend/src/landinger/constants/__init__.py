"""Configuration constants.

Re-exports all constants for convenient importing:
    from landinger.constants import PAGES_PREFIX, MAX_TOKENS
"""

from landinger.constants.llm import *  # noqa: F403
from landinger.constants.storage import *  # noqa: F403
from landinger.constants.pages import *  # noqa: F403
