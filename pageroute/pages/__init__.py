"""
================================================================================
Page Objects
================================================================================

Shared page-object configuration merged under every route.

Author: Automation Team
License: MIT
================================================================================
"""

from .base_page import BASE_PAGE_OBJECT

__all__ = [
    "BASE_PAGE_OBJECT",
]
