from pathlib import Path

import pytest

from autofile.models.exceptions import ConfigurationError, RuleMissingError
from autofile.models.schemas import Category, CategoryRule
from domains.file_organizer.rules import DestinationRuleTable


def test_default_destinations(home):
    table = DestinationRuleTable.with_defaults(home)

    assert table.destination_for(Category.DOCUMENT) == home / "Documents"
    assert table.destination_for(Category.IMAGE) == home / "Pictures"
    assert table.destination_for(Category.VIDEO) == home / "Videos"
    assert table.destination_for(Category.AUDIO) == home / "Music"
    assert table.destination_for(Category.ARCHIVE) == home / "Documents" / "Archives"
    assert table.destination_for(Category.CODE) == home / "Projects"
    assert table.destination_for(Category.UNKNOWN) is None


def test_overrides_resolve_relative_to_home(home, tmp_path):
    absolute = tmp_path / "elsewhere" / "Clips"
    table = DestinationRuleTable.with_defaults(
        home,
        {"Image": Path("Media/Photos"), "video": absolute},
    )

    assert table.destination_for(Category.IMAGE) == home / "Media" / "Photos"
    assert table.destination_for(Category.VIDEO) == absolute
    assert table.get_rule(Category.IMAGE).name == "Images"


@pytest.mark.parametrize("bad", ["spreadsheets", "unknown"])
def test_invalid_override_category(home, bad):
    with pytest.raises(ConfigurationError):
        DestinationRuleTable.with_defaults(home, {bad: Path("X")})


def test_unknown_category_rule_rejected(home):
    with pytest.raises(ConfigurationError):
        DestinationRuleTable({Category.UNKNOWN: CategoryRule(name="Misc", destination=home / "Misc")})


def test_require_destination_for_unmapped_category(home):
    table = DestinationRuleTable({Category.IMAGE: CategoryRule(name="Images", destination=home / "Pictures")})

    assert table.destination_for(Category.CODE) is None
    with pytest.raises(RuleMissingError):
        table.require_destination(Category.CODE)


def test_rules_are_read_only(home):
    table = DestinationRuleTable.with_defaults(home)

    with pytest.raises(TypeError):
        table.rules[Category.CODE] = CategoryRule(name="x", destination=home)


def test_ensure_destinations_exist_creates_directories(home):
    table = DestinationRuleTable.with_defaults(home)

    table.ensure_destinations_exist()

    for rule in table.rules.values():
        assert rule.destination.is_dir()


def test_ensure_destinations_exist_failure_is_configuration_error(home):
    # A plain file where the Documents directory should be
    (home / "Documents").write_text("not a directory")
    table = DestinationRuleTable.with_defaults(home)

    with pytest.raises(ConfigurationError):
        table.ensure_destinations_exist()
