import io
import tarfile
import zipfile

import pytest

from fnkit.compress import DecompressError, decompress


def _make_zip(path, files):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)


def test_decompress_zip_into_new_directory(tmp_path):
    archive = tmp_path / "dist.zip"
    _make_zip(archive, {"index.html": "<html></html>", "assets/app.js": "console.log(1)"})
    dest = tmp_path / "dist"

    decompress(archive, dest)

    assert (dest / "index.html").read_text() == "<html></html>"
    assert (dest / "assets" / "app.js").read_text() == "console.log(1)"


def test_decompress_tar_gz(tmp_path):
    archive = tmp_path / "bundle.tar.gz"
    payload = b"hello tar"
    with tarfile.open(archive, "w:gz") as tf:
        info = tarfile.TarInfo("inner/readme.txt")
        info.size = len(payload)
        tf.addfile(info, io.BytesIO(payload))
    dest = tmp_path / "out"

    decompress(str(archive), str(dest))

    assert (dest / "inner" / "readme.txt").read_bytes() == payload


def test_missing_archive_raises(tmp_path):
    with pytest.raises(DecompressError):
        decompress(tmp_path / "absent.zip", tmp_path / "dest")


def test_unknown_format_raises(tmp_path):
    archive = tmp_path / "data.bin"
    archive.write_bytes(b"not an archive")
    with pytest.raises(DecompressError, match="format unrecognized"):
        decompress(archive, tmp_path / "dest")


def test_path_traversal_rejected(tmp_path):
    archive = tmp_path / "evil.zip"
    _make_zip(archive, {"../escape.txt": "x"})
    dest = tmp_path / "dest"
    with pytest.raises(DecompressError, match="illegal file path"):
        decompress(archive, dest)
    assert not (tmp_path / "escape.txt").exists()


def test_existing_file_not_overwritten(tmp_path):
    archive = tmp_path / "dist.zip"
    _make_zip(archive, {"a.txt": "new"})
    dest = tmp_path / "dist"
    dest.mkdir()
    (dest / "a.txt").write_text("old")

    with pytest.raises(DecompressError, match="already exists"):
        decompress(archive, dest)
    assert (dest / "a.txt").read_text() == "old"