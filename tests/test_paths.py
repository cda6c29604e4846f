"""Tests for local/remote path translation."""

from pathlib import Path

import pytest

from ftpsync.sync.paths import PathMapper


@pytest.fixture
def work_mapper():
    return PathMapper("theme", local_root=Path("/work/site"))


class TestToRemote:
    def test_root(self, work_mapper):
        assert work_mapper.to_remote(".") == "theme"

    def test_nested(self, work_mapper):
        assert work_mapper.to_remote("./css/site.css") == "theme/css/site.css"

    def test_non_local_path_unchanged(self, work_mapper):
        assert work_mapper.to_remote("theme/a.js") == "theme/a.js"

    def test_absolute_remote_root(self):
        mapper = PathMapper("/public_html/", local_root=Path("/work"))
        assert mapper.to_remote("./a.js") == "/public_html/a.js"

    def test_slash_root(self):
        mapper = PathMapper("/", local_root=Path("/work"))
        assert mapper.to_remote("./a.js") == "/a.js"
        assert mapper.to_local("/a.js") == "./a.js"


class TestToLocal:
    def test_remote_root(self, work_mapper):
        assert work_mapper.to_local("theme") == "."

    def test_remote_nested(self, work_mapper):
        assert work_mapper.to_local("theme/css/site.css") == "./css/site.css"

    def test_absolute_local_path(self, work_mapper):
        assert work_mapper.to_local("/work/site/css/site.css") == "./css/site.css"
        assert work_mapper.to_local("/work/site") == "."

    def test_sibling_of_local_root_is_not_stripped(self, work_mapper):
        assert work_mapper.to_local("/work/site2/a.css") == "/work/site2/a.css"

    def test_local_path_is_idempotent(self, work_mapper):
        assert work_mapper.to_local("./css/site.css") == "./css/site.css"
        assert work_mapper.to_local(work_mapper.to_local("theme/a")) == "./a"

    def test_backslashes_normalized(self, work_mapper):
        assert work_mapper.to_local(".\\css\\site.css") == "./css/site.css"

    def test_segment_prefix_does_not_match(self, work_mapper):
        assert work_mapper.to_local("theme2/a.css") == "theme2/a.css"

    def test_local_directory_named_like_remote_root(self, work_mapper):
        assert work_mapper.to_local("./theme/a.css") == "./theme/a.css"

    def test_multi_segment_root(self):
        mapper = PathMapper("sites/shop", local_root=Path("/work"))
        assert mapper.to_local("sites/shop/a/b.css") == "./a/b.css"
        assert mapper.to_remote("./a/b.css") == "sites/shop/a/b.css"


class TestRoundTrip:
    """Mapping is a bijection on well-formed paths."""

    @pytest.mark.parametrize(
        "path", [".", "./index.html", "./css/site.css", "./theme/nested/x.js"]
    )
    def test_local_round_trip(self, work_mapper, path):
        assert work_mapper.to_local(work_mapper.to_remote(path)) == path

    @pytest.mark.parametrize(
        "path", ["theme", "theme/index.html", "theme/css/site.css"]
    )
    def test_remote_round_trip(self, work_mapper, path):
        assert work_mapper.to_remote(work_mapper.to_local(path)) == path


class TestLocalFsPath:
    def test_resolves_under_root(self, work_mapper):
        assert work_mapper.local_fs_path("./css/site.css") == Path("/work/site/css/site.css")
        assert work_mapper.local_fs_path(".") == Path("/work/site")
