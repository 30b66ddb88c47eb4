from helmify.files import walk


def _collect(paths, recursively=False):
    return [(name, stream.read()) for name, stream in walk(paths, recursively)]


def _tree(tmp_path):
    (tmp_path / "b.yaml").write_text("kind: B\n", encoding="utf-8")
    (tmp_path / "a.yaml").write_text("kind: A\n", encoding="utf-8")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "c.yaml").write_text("kind: C\n", encoding="utf-8")
    return tmp_path


def test_single_file(tmp_path):
    target = tmp_path / "app.yaml"
    target.write_text("kind: Service\n", encoding="utf-8")
    assert _collect([str(target)]) == [("app.yaml", "kind: Service\n")]


def test_missing_path_is_skipped(tmp_path):
    target = tmp_path / "app.yaml"
    target.write_text("kind: Service\n", encoding="utf-8")
    result = _collect([str(tmp_path / "missing.yaml"), str(target)])
    assert [name for name, _ in result] == ["app.yaml"]


def test_directory_not_recursive_skips_subdirectories(tmp_path):
    root = _tree(tmp_path)
    result = _collect([str(root)])
    assert result == [("a.yaml", "kind: A\n"), ("b.yaml", "kind: B\n")]


def test_directory_recursive_includes_nested(tmp_path):
    root = _tree(tmp_path)
    names = [name for name, _ in _collect([str(root)], recursively=True)]
    assert sorted(names) == ["a.yaml", "b.yaml", "c.yaml"]
    assert len(names) == 3


def test_multiple_paths_keep_order(tmp_path):
    root = _tree(tmp_path)
    nested = root / "nested"
    names = [name for name, _ in _collect([str(nested), str(root / "a.yaml")])]
    assert names == ["c.yaml", "a.yaml"]


def test_streams_are_closed_after_use(tmp_path):
    root = _tree(tmp_path)
    streams = [stream for _, stream in walk([str(root)])]
    assert streams
    assert all(stream.closed for stream in streams)