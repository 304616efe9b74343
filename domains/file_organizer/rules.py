"""
Destination rule table for the File Organizer domain.

Maps each category to its top-level destination directory. Built once at
startup and read-only afterwards, so the worker thread can read it without
synchronisation.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from loguru import logger

from autofile.models.exceptions import ConfigurationError, RuleMissingError
from autofile.models.schemas import Category, CategoryRule
from autofile.utils.config import get_home_dir

# (display name, path relative to home)
DEFAULT_RULES: dict[Category, tuple[str, tuple[str, ...]]] = {
    Category.DOCUMENT: ("Documents", ("Documents",)),
    Category.IMAGE: ("Images", ("Pictures",)),
    Category.VIDEO: ("Videos", ("Videos",)),
    Category.AUDIO: ("Music", ("Music",)),
    Category.ARCHIVE: ("Archives", ("Documents", "Archives")),
    Category.CODE: ("Projects", ("Projects",)),
}


def build_default_rules(home: Optional[Path] = None) -> dict[Category, CategoryRule]:
    """Return the default rule set rooted at ``home``."""
    home = home or get_home_dir()
    return {
        category: CategoryRule(name=name, destination=home.joinpath(*parts))
        for category, (name, parts) in DEFAULT_RULES.items()
    }


def parse_category(raw: str) -> Category:
    """Parse a category name from configuration (case-insensitive)."""
    try:
        category = Category(raw.strip().lower())
    except ValueError as e:
        raise ConfigurationError(f"Unknown category in destination rules: {raw!r}") from e

    if category is Category.UNKNOWN:
        raise ConfigurationError("The 'unknown' category cannot have a destination")
    return category


class DestinationRuleTable:
    """Category → destination directory lookup."""

    def __init__(self, rules: Mapping[Category, CategoryRule]):
        """
        Initialize rule table.

        Args:
            rules: One rule per organizable category
        """
        if Category.UNKNOWN in rules:
            raise ConfigurationError("The 'unknown' category cannot have a destination")
        self._rules: Mapping[Category, CategoryRule] = MappingProxyType(dict(rules))

    @classmethod
    def with_defaults(
        cls,
        home: Optional[Path] = None,
        overrides: Optional[Mapping[str, Path]] = None,
    ) -> "DestinationRuleTable":
        """
        Build the default table, applying configured overrides.

        Relative override paths are resolved against ``home``.

        Args:
            home: Home directory (defaults to the current user's)
            overrides: Category name → destination directory

        Returns:
            Rule table
        """
        home = home or get_home_dir()
        rules = build_default_rules(home)

        for raw_category, destination in (overrides or {}).items():
            category = parse_category(raw_category)
            destination = Path(destination).expanduser()
            if not destination.is_absolute():
                destination = home / destination
            rules[category] = CategoryRule(name=rules[category].name, destination=destination)
            logger.info(f"Destination override for {category.value}: {destination}")

        return cls(rules)

    @property
    def rules(self) -> Mapping[Category, CategoryRule]:
        """Read-only view of the configured rules."""
        return self._rules

    def get_rule(self, category: Category) -> Optional[CategoryRule]:
        """Return the rule for ``category`` or None."""
        return self._rules.get(category)

    def destination_for(self, category: Category) -> Optional[Path]:
        """Return the destination for ``category``; None for Unknown/unmapped."""
        rule = self._rules.get(category)
        return rule.destination if rule else None

    def require_destination(self, category: Category) -> Path:
        """
        Return the destination for ``category``.

        Raises:
            RuleMissingError: if no rule exists
        """
        destination = self.destination_for(category)
        if destination is None:
            raise RuleMissingError(f"No destination configured for category '{category.value}'")
        return destination

    def ensure_destinations_exist(self) -> None:
        """
        Create every rule's directory if absent.

        Raises:
            ConfigurationError: if a directory cannot be created
        """
        for category, rule in self._rules.items():
            if rule.destination.is_dir():
                continue

            logger.info(f"Creating destination directory for {category.value}: {rule.destination}")
            try:
                rule.destination.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to create directory {rule.destination}: {e}",
                    path=rule.destination,
                ) from e
