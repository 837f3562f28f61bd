from pathlib import Path

import pytest

from treemerge.exclusion_rules.git_rules import GitIgnoreExclusionRules


@pytest.fixture
def ignore_file(tmp_path):
    path = tmp_path / ".mergeignore"
    path.write_text(
        "\n".join(
            [
                "# generated code",
                "*.Designer.cs",
                "!Keep.Designer.cs",
                "generated/",
                "**/Snapshots/",
                "appsettings.*.json",
            ]
        )
        + "\n"
    )
    return path


def check(rules, relative_path, is_dir=False):
    return rules.exclude(Path("/repo").joinpath(relative_path), relative_path, is_dir)


@pytest.mark.parametrize(
    "relative_path,is_dir,expected",
    [
        ("Form.Designer.cs", False, True),
        ("src/Form.Designer.cs", False, True),
        ("Keep.Designer.cs", False, False),
        ("src/Keep.Designer.cs", False, False),
        ("Form.cs", False, False),
        ("generated", True, True),
        ("src/generated", True, True),
        ("generated", False, False),
        ("generated/Client.cs", False, True),
        ("tests/Snapshots", True, True),
        ("appsettings.Development.json", False, True),
        ("appsettings.json", False, False),
    ],
)
def test_rules_from_file(ignore_file, relative_path, is_dir, expected):
    rules = GitIgnoreExclusionRules(ignore_file)
    assert check(rules, relative_path, is_dir) == expected, f"Failed for path: {relative_path}"


def test_empty_rules_exclude_nothing():
    rules = GitIgnoreExclusionRules()
    assert not rules.has_rules()
    assert not check(rules, "anything.cs")
    assert not check(rules, "src", is_dir=True)


def test_comment_and_blank_lines_are_ignored(tmp_path):
    path = tmp_path / "ignore"
    path.write_text("# only a comment\n\n")
    rules = GitIgnoreExclusionRules(path)
    assert not check(rules, "# only a comment")
    assert not check(rules, "file.cs")


def test_missing_rules_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Rules file not found"):
        GitIgnoreExclusionRules(tmp_path / "missing")


def test_load_multiple_files_in_order(tmp_path):
    first = tmp_path / "first"
    first.write_text("*.json\n")
    second = tmp_path / "second"
    second.write_text("!package.json\n")

    rules = GitIgnoreExclusionRules([first, second])
    assert check(rules, "tsconfig.json")
    assert not check(rules, "package.json")


def test_add_rule_after_file_overrides(ignore_file):
    rules = GitIgnoreExclusionRules(ignore_file)
    assert check(rules, "Form.cs") is False

    rules.add_rule("Form.cs")
    assert check(rules, "Form.cs") is True

    rules.add_rule("!Form.cs")
    assert check(rules, "Form.cs") is False


def test_add_rule_then_load_rules_mixes_in_order(tmp_path):
    rules = GitIgnoreExclusionRules()
    rules.add_rule("!Startup.cs")

    ignore = tmp_path / "ignore"
    ignore.write_text("*.cs\n")
    rules.load_rules(ignore)

    # The file pattern comes last and wins
    assert check(rules, "Startup.cs")
    assert rules.has_rules()


def test_directory_only_pattern_needs_directory_flag():
    rules = GitIgnoreExclusionRules()
    rules.add_rule("build/")
    assert check(rules, "build", is_dir=True)
    assert not check(rules, "build", is_dir=False)
