"""Tests for FileRef and glob resolution."""

import logging
import os

import pytest

from adaptkit.files import FileRef, find_files, glob_to_regex, matches_any


@pytest.fixture
def build_tree(tmp_path):
    for rel in (
        "static/js/main.1a2b.js",
        "static/js/runtime-main.js",
        "static/js/main.1a2b.js.map",
        "static/css/main.css",
        "static/media/logo.svg",
        "static/media/fonts/roboto.woff2",
        "index.html",
    ):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel)
    return tmp_path


class TestFileRef:
    def test_without_suffix(self):
        assert FileRef("static/js/main.1a2b.js").without_suffix() == "static/js/main.1a2b"

    def test_without_suffix_no_extension(self):
        assert FileRef("LICENSE").without_suffix() == "LICENSE"

    def test_of_normalizes_separators(self):
        assert FileRef.of(os.path.join("static", "js", "main.js")).as_posix == "static/js/main.js"

    def test_under(self, tmp_path):
        assert FileRef("a/b.css").under(tmp_path) == tmp_path / "a" / "b.css"

    def test_ordering(self):
        assert sorted([FileRef("b"), FileRef("a/c")]) == [FileRef("a/c"), FileRef("b")]


class TestGlobs:
    @pytest.mark.parametrize(
        "pattern, path, expected",
        [
            ("static/js/*.js", "static/js/main.js", True),
            ("static/js/*.js", "static/js/nested/main.js", False),
            ("static/media/**/*", "static/media/logo.svg", True),
            ("static/media/**/*", "static/media/fonts/roboto.woff2", True),
            ("**/*.css", "main.css", True),
            ("*.ic?", "favicon.ico", True),
            ("[!.]*.js", "main.js", True),
            ("[!.]*.js", ".hidden.js", False),
            ("./static/css/*.css", "static/css/main.css", True),
        ],
    )
    def test_glob_to_regex(self, pattern, path, expected):
        assert bool(glob_to_regex(pattern).fullmatch(path)) is expected

    def test_negation_excludes(self):
        globs = ["static/js/*", "!static/js/*.map"]
        assert matches_any("static/js/main.js", globs)
        assert not matches_any("static/js/main.js.map", globs)

    def test_only_negations_match_nothing(self):
        assert not matches_any("a.js", ["!b.js"])


class TestFindFiles:
    def test_sorted_and_relative(self, build_tree):
        found = find_files(build_tree, ["static/js/*.js"])
        assert [f.as_posix for f in found] == ["static/js/main.1a2b.js", "static/js/runtime-main.js"]

    def test_overlapping_globs_deduplicated(self, build_tree):
        found = find_files(build_tree, ["static/css/*.css", "**/*.css"])
        assert [f.as_posix for f in found] == ["static/css/main.css"]

    def test_directories_never_returned(self, build_tree):
        found = find_files(build_tree, ["static/*"])
        assert found == []

    def test_negated_glob(self, build_tree):
        found = find_files(build_tree, ["static/media/**/*", "!**/*.woff2"])
        assert [f.as_posix for f in found] == ["static/media/logo.svg"]

    def test_missing_base_dir_is_empty(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING, logger="adaptkit")
        assert find_files(tmp_path / "missing", ["*"]) == []
        assert "does not exist" in caplog.text

    def test_unmatched_glob_logged_at_debug(self, build_tree, caplog):
        caplog.set_level(logging.DEBUG, logger="adaptkit")
        assert find_files(build_tree, ["nothing/*.js"]) == []
        assert "matched no files" in caplog.text

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinks(self, build_tree):
        (build_tree / "link.css").symlink_to(build_tree / "static" / "css" / "main.css")
        (build_tree / "dangling.css").symlink_to(build_tree / "gone.css")
        (build_tree / "dirlink").symlink_to(build_tree / "static" / "css", target_is_directory=True)
        found = find_files(build_tree, ["*.css", "dirlink/*.css"])
        assert [f.as_posix for f in found] == ["link.css"]
