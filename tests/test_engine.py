"""Tests for the recursive sync engine."""

import os

import pytest

from ftpsync.exceptions import ListError, TransferError
from ftpsync.sync import IgnoreMatcher, SyncEngine


@pytest.fixture
def make_engine(fake_client, mapper, quiet_output):
    def factory(patterns=None, dry_run=False):
        return SyncEngine(
            fake_client,
            mapper,
            IgnoreMatcher(patterns),
            output=quiet_output,
            dry_run=dry_run,
        )

    return factory


class TestSyncEngine:
    """Test SyncEngine functionality."""

    def test_create_sync_engine(self, make_engine, fake_client):
        engine = make_engine()
        assert engine.client is fake_client
        assert engine.operations is not None
        assert engine.dry_run is False

    def test_empty_trees(self, make_engine):
        stats = make_engine().run()

        assert stats.transfers == 0
        assert stats.directories == 1

    def test_creates_missing_remote_root(self, mapper, quiet_output, fake_client_class):
        client = fake_client_class(root_exists=False)
        engine = SyncEngine(client, mapper, IgnoreMatcher(), output=quiet_output)

        engine.run()

        assert ("mkdir", "theme") in client.calls

    def test_uploads_local_only_files(self, tmp_path, fake_client, make_engine):
        (tmp_path / "index.html").write_bytes(b"x" * 50)

        stats = make_engine().run()

        assert stats.uploads == 1
        assert stats.bytes_transferred == 50
        assert fake_client.files["theme/index.html"][0] == b"x" * 50

    def test_downloads_remote_only_files(self, tmp_path, fake_client, make_engine):
        fake_client.add_file("theme/logo.png", b"png")

        stats = make_engine().run()

        assert stats.downloads == 1
        assert (tmp_path / "logo.png").read_bytes() == b"png"

    def test_recurses_into_directories_on_both_sides(self, tmp_path, fake_client, make_engine):
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "site.css").write_text("body{}")
        fake_client.add_dir("theme/img")
        fake_client.add_dir("theme/img/icons")
        fake_client.add_file("theme/img/icons/x.svg", b"<svg/>")

        stats = make_engine().run()

        assert "theme/css" in fake_client.dirs
        assert fake_client.files["theme/css/site.css"][0] == b"body{}"
        assert (tmp_path / "img" / "icons" / "x.svg").read_bytes() == b"<svg/>"
        assert stats.directories == 4

    def test_files_before_directories_per_level(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "inner.txt").write_text("1")
        (tmp_path / "z.txt").write_text("2")

        make_engine().run()

        puts = [path for op, path in fake_client.calls if op == "put"]
        assert puts == ["theme/z.txt", "theme/a/inner.txt"]

    def test_newer_remote_file_wins(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a.css").write_bytes(b"old")
        os.utime(tmp_path / "a.css", ns=(0, 1_000_000_000))
        fake_client.add_file("theme/a.css", b"newer!", time=5_000)

        stats = make_engine().run()

        assert stats.downloads == 1
        assert (tmp_path / "a.css").read_bytes() == b"newer!"

    def test_newer_local_file_wins(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a.css").write_bytes(b"newer!")
        fake_client.add_file("theme/a.css", b"old", time=5_000)

        stats = make_engine().run()

        assert stats.uploads == 1
        assert fake_client.files["theme/a.css"][0] == b"newer!"

    def test_equal_sizes_are_left_alone(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a.css").write_bytes(b"aaa")
        fake_client.add_file("theme/a.css", b"bbb", time=10**13)

        stats = make_engine().run()

        assert stats.transfers == 0
        assert (tmp_path / "a.css").read_bytes() == b"aaa"

    def test_ignored_entries_skipped(self, tmp_path, fake_client, make_engine):
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "x.js").write_text("x")
        (tmp_path / "style.scss").write_text("$a: 1;")
        (tmp_path / "sync.json").write_text("{}")
        (tmp_path / "style.css").write_text("a{}")

        stats = make_engine(patterns=["*.scss"]).run()

        assert stats.uploads == 1
        assert set(fake_client.files) == {"theme/style.css"}
        assert "theme/node_modules" not in fake_client.dirs

    def test_second_run_transfers_nothing(self, tmp_path, fake_client, make_engine):
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "site.css").write_text("body{}")
        (tmp_path / "index.html").write_text("<html>")
        fake_client.add_dir("theme/img")
        fake_client.add_file("theme/img/logo.png", b"png")
        fake_client.add_file("theme/robots.txt", b"User-agent: *")

        first = make_engine().run()
        second = make_engine().run()

        assert first.transfers == 4
        assert second.transfers == 0

    def test_never_deletes(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a.txt").write_text("local")
        (tmp_path / "same.txt").write_text("same")
        fake_client.add_file("theme/b.txt", b"remote")
        fake_client.add_file("theme/same.txt", b"diff!!", time=1)

        make_engine().run()

        assert fake_client.operations() <= {"ls", "put", "get", "mkdir"}
        assert {"theme/a.txt", "theme/b.txt", "theme/same.txt"} <= set(fake_client.files)
        assert (tmp_path / "a.txt").exists()
        assert (tmp_path / "b.txt").exists()

    def test_upload_failure_propagates(self, tmp_path, fake_client, make_engine):
        (tmp_path / "a.txt").write_text("a")
        fake_client.put_failures = 1

        with pytest.raises(TransferError):
            make_engine().run()


class TestDryRun:
    """Dry runs report transfers without touching either side."""

    def test_reports_without_transferring(self, tmp_path, fake_client, make_engine):
        (tmp_path / "index.html").write_text("<html>")
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "a.css").write_text("a")
        fake_client.add_file("theme/logo.png", b"png")

        stats = make_engine(dry_run=True).run()

        assert stats.uploads == 2
        assert stats.downloads == 1
        assert fake_client.operations() == {"ls"}
        assert not (tmp_path / "logo.png").exists()

    def test_missing_sides_listed_as_empty(
        self, tmp_path, mapper, quiet_output, fake_client_class
    ):
        client = fake_client_class(root_exists=False)
        (tmp_path / "a.txt").write_text("a")
        engine = SyncEngine(client, mapper, IgnoreMatcher(), output=quiet_output, dry_run=True)

        stats = engine.run()

        assert stats.uploads == 1
        assert client.dirs == set()

    def test_list_errors_raise_outside_dry_run(self, tmp_path, mapper, quiet_output):
        engine = SyncEngine(
            _BrokenListingClient(), mapper, IgnoreMatcher(), output=quiet_output
        )

        with pytest.raises(ListError):
            engine.get_sync_items(".")


class _BrokenListingClient:
    def ls(self, path):
        return [{"type": 1, "name": ".", "size": "0", "time": "0"}]

    def list(self, path):
        raise ListError("boom", path)
