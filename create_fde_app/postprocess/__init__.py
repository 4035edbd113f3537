"""Framework-specific post-processing run right after project generation.

Key classes:
    BasePostProcessor   - env templates plus warn-only hooks
    NextPostProcessor   - health route, security headers, error pages
    NuxtPostProcessor   - server API route, route-rule headers, Nitro plugin
    RemixPostProcessor  - resource route, entry.server headers, ErrorBoundary
"""

from .base import BasePostProcessor
from .loader import POST_PROCESSORS, load_post_processor
from .nextjs import NextPostProcessor
from .nuxtjs import NuxtPostProcessor
from .remix import RemixPostProcessor

__all__ = [
    "POST_PROCESSORS",
    "BasePostProcessor",
    "NextPostProcessor",
    "NuxtPostProcessor",
    "RemixPostProcessor",
    "load_post_processor",
]
