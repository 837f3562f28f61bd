import os
from pathlib import Path
from unittest.mock import patch

import pytest

from treemerge.exceptions import InvalidRootError, TraversalError
from treemerge.exclusion_rules.git_rules import GitIgnoreExclusionRules
from treemerge.exclusion_rules.name_rules import FilterRules
from treemerge.tree.nodes import DirectoryNode, FileNode
from treemerge.tree.tree_builder import TreeBuilder, build_tree, count_directories, count_files, iterate_files


@pytest.fixture
def project(make_tree):
    return make_tree(
        {
            "Program.cs": "class Program {}",
            "README.md": "# readme",
            ".editorconfig": "root = true",
            "src/App.razor": "<h1>App</h1>",
            "src/Models/User.cs": "class User {}",
            "src/Models/notes.txt": "not merged",
            "bin/Debug/App.dll": b"\x00\x01",
            "bin/Debug/App.cs": "class Hidden {}",
            "Shop.Tests/UserTests.cs": "class UserTests {}",
            ".git/config": "[core]",
            "Empty/": None,
        }
    )


def posix_paths(nodes):
    return sorted(n.posix_path for n in nodes)


def test_build_filters_and_prunes(project):
    root = build_tree(project)

    assert isinstance(root, DirectoryNode)
    assert root.relative_path == "."
    assert root.absolute_path == Path(os.path.abspath(project))
    assert posix_paths(iterate_files(root)) == ["Program.cs", "src/App.razor", "src/Models/User.cs"]


def test_excluded_directories_are_not_entered(project):
    visited = []
    real_scandir = os.scandir

    def recording_scandir(path):
        visited.append(Path(path).name)
        return real_scandir(path)

    with patch("treemerge.tree.tree_builder.os.scandir", side_effect=recording_scandir):
        build_tree(project)

    assert "bin" not in visited
    assert "Debug" not in visited
    assert "Shop.Tests" not in visited
    assert ".git" not in visited
    assert sorted(visited) == sorted(["project", "src", "Models", "Empty"])


def test_counts(project):
    root = build_tree(project)
    assert count_files(root) == 3
    # src, src/Models and the empty directory
    assert count_directories(root) == 3


def test_empty_directories_are_kept(project):
    root = build_tree(project)
    empty = [d for d in root.subdirectories if d.name == "Empty"]
    assert len(empty) == 1
    assert empty[0].children == ()


def test_files_come_before_subdirectories(make_tree):
    root_path = make_tree(
        {
            "a/inner.cs": "",
            "z.cs": "",
            "a/b/deep.cs": "",
        }
    )
    root = build_tree(root_path)

    assert [n.posix_path for n in iterate_files(root)] == ["z.cs", "a/inner.cs", "a/b/deep.cs"]
    assert all(isinstance(child, FileNode) for child in root.children[: len(root.files)])
    assert all(isinstance(child, DirectoryNode) for child in root.children[len(root.files) :])


def test_custom_filter_rules(project):
    rules = FilterRules(included_extensions=(".md", "txt"), ignore_dot_files=False)
    root = TreeBuilder(rules).build(project)
    assert posix_paths(iterate_files(root)) == ["README.md", "src/Models/notes.txt"]
    # .git is entered once dot files are allowed, but config has no allowed extension
    assert ".git" in [d.name for d in root.subdirectories]


def test_extra_rules_see_relative_posix_paths(project):
    patterns = GitIgnoreExclusionRules()
    patterns.add_rule("src/Models/")
    root = TreeBuilder(extra_rules=patterns).build(project)

    assert posix_paths(iterate_files(root)) == ["Program.cs", "src/App.razor"]
    assert count_directories(root) == 2


def test_relative_root_is_made_absolute(project, monkeypatch):
    monkeypatch.chdir(project.parent)
    root = build_tree("project")
    assert root.absolute_path.is_absolute()
    assert root.name == "project"


def test_missing_root(tmp_path):
    with pytest.raises(InvalidRootError, match="does not exist"):
        build_tree(tmp_path / "missing")


def test_root_is_a_file(tmp_path):
    path = tmp_path / "Program.cs"
    path.write_text("")
    with pytest.raises(InvalidRootError, match="is not a directory"):
        build_tree(path)


def test_unreadable_directory_aborts_build(project):
    real_scandir = os.scandir

    def failing_scandir(path):
        if Path(path).name == "Models":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    with patch("treemerge.tree.tree_builder.os.scandir", side_effect=failing_scandir):
        with pytest.raises(TraversalError) as excinfo:
            build_tree(project)

    error = excinfo.value
    assert error.is_permission_error
    assert error.path.endswith("Models")
    assert isinstance(error.__cause__, PermissionError)
    assert "Permission denied" in str(error)


def test_other_os_errors_are_traversal_errors(project):
    with patch("treemerge.tree.tree_builder.os.scandir", side_effect=OSError(5, "Input/output error")):
        with pytest.raises(TraversalError) as excinfo:
            build_tree(project)
    assert not excinfo.value.is_permission_error


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
class TestSymlinks:
    @pytest.fixture
    def linked_project(self, make_tree, tmp_path):
        root = make_tree({"src/App.cs": "", "Main.cs": ""})
        outside = tmp_path / "shared"
        outside.mkdir()
        (outside / "Shared.cs").write_text("")
        try:
            (root / "shared").symlink_to(outside, target_is_directory=True)
            (root / "src" / "loop").symlink_to(root, target_is_directory=True)
            (root / "Alias.cs").symlink_to(root / "Main.cs")
        except OSError:
            pytest.skip("cannot create symlinks")
        return root

    def test_directory_links_skipped_by_default(self, linked_project):
        root = build_tree(linked_project)
        assert posix_paths(iterate_files(root)) == ["Alias.cs", "Main.cs", "src/App.cs"]

    def test_follow_symlinks_breaks_loops(self, linked_project):
        root = build_tree(linked_project, follow_symlinks=True)
        assert posix_paths(iterate_files(root)) == ["Alias.cs", "Main.cs", "shared/Shared.cs", "src/App.cs"]
