"""Optional augmentations layered onto a generated project.

Tokens have the form ``category:type``, e.g. ``database:postgres``.

Key classes:
    AugmentationProcessor  - ordered, continue-on-error token dispatch
    AugmentationReport     - succeeded / failed / skipped tokens
    Recipe                 - declarative description of one augmentation
"""

from .auth import AUTH_PROVIDERS, setup_auth
from .base import (
    AugmentationError,
    FileSpec,
    Recipe,
    UnknownAugmentationError,
    apply_recipe,
)
from .database import DATABASES, setup_database
from .monitoring import MONITORING_PROVIDERS, setup_monitoring
from .processor import (
    AugmentationProcessor,
    AugmentationReport,
    AugmentationToken,
    build_default_handlers,
    parse_token,
)
from .utilities import UTILITY_RECIPES, setup_utility

__all__ = [
    # Dispatch
    "AugmentationProcessor",
    "AugmentationReport",
    "AugmentationToken",
    "build_default_handlers",
    "parse_token",
    # Recipes
    "AugmentationError",
    "UnknownAugmentationError",
    "FileSpec",
    "Recipe",
    "apply_recipe",
    # Category dispatchers
    "AUTH_PROVIDERS",
    "DATABASES",
    "MONITORING_PROVIDERS",
    "UTILITY_RECIPES",
    "setup_auth",
    "setup_database",
    "setup_monitoring",
    "setup_utility",
]
