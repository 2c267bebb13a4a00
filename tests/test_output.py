from pathlib import Path

import pytest

from palette_post.errors import OutputIOError
from palette_post.output import (
    OutputTarget,
    destination_for,
    input_stem,
    open_destination,
    resolve_output_target,
)


class TestResolveOutputTarget:
    def test_stream_token(self):
        t = resolve_output_target("-")
        assert t.kind == "stream"
        assert t.is_stream and not t.is_directory
        assert t.describe() == "stdout"

    def test_existing_directory(self, tmp_path):
        t = resolve_output_target(str(tmp_path))
        assert t.kind == "directory"
        assert t.path == tmp_path

    def test_anything_else_is_a_file(self, tmp_path):
        t = resolve_output_target(str(tmp_path / "missing" / "x.png"))
        assert t.kind == "file"


class TestDestination:
    def test_directory_derives_name_from_input(self, tmp_path):
        t = OutputTarget("directory", tmp_path)
        assert destination_for(t, "photos/a.jpg", "png") == tmp_path / "a.png"
        assert destination_for(t, "b.tar.gz", "gif") == tmp_path / "b.tar.gif"

    def test_file_used_literally(self, tmp_path):
        t = OutputTarget("file", tmp_path / "out.gif")
        assert destination_for(t, "whatever.png", "gif") == tmp_path / "out.gif"

    def test_stream_has_no_path(self):
        assert destination_for(OutputTarget("stream"), "a.png", "png") is None

    def test_input_stem(self):
        assert input_stem("dir/noext") == "noext"
        assert input_stem(str(Path("x") / "y.png")) == "y"


class TestOpenDestination:
    def test_truncates_by_default(self, tmp_path):
        p = tmp_path / "o.bin"
        p.write_bytes(b"old content")
        with open_destination(p, no_overwrite=False) as fh:
            fh.write(b"new")
        assert p.read_bytes() == b"new"

    def test_exclusive_open_fails_on_existing_file(self, tmp_path):
        p = tmp_path / "o.bin"
        p.write_bytes(b"keep")
        with pytest.raises(OutputIOError) as exc:
            with open_destination(p, no_overwrite=True):
                pass
        assert exc.value.path == str(p)
        assert str(p) in str(exc.value)
        assert p.read_bytes() == b"keep"
