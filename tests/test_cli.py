import pytest

from pagepack.cli import main


def test_missing_project_directory_exits_with_an_error(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 1
    assert "Missing project directory" in capsys.readouterr().err


def test_nonexistent_project_directory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        main(["nope"])
    assert info.value.code == 1


def test_build_cleans_the_output_directory(monkeypatch, tmp_path, src_dir, dst_dir, write, capsys):
    monkeypatch.chdir(tmp_path)
    write(src_dir / "index.page.md", "# Hi\n")
    write(src_dir / "blog" / "post.page.md", "# Post\n")
    write(dst_dir / "stale.html", "old")
    main([str(src_dir), "--out", str(dst_dir)])
    assert (dst_dir / "index.html").is_file()
    assert (dst_dir / "blog" / "post.html").is_file()
    assert not (dst_dir / "stale.html").exists()
    assert "Build completed in" in capsys.readouterr().out


def test_defaults_come_from_the_config_file(monkeypatch, tmp_path, src_dir, write):
    monkeypatch.chdir(tmp_path)
    write(tmp_path / "pagepack.toml", 'out = "public"\n')
    write(src_dir / "index.page.md", "# Hi\n")
    main(["site"])
    assert (tmp_path / "public" / "index.html").is_file()


def test_failed_pages_set_the_exit_code(monkeypatch, tmp_path, src_dir, dst_dir, write):
    monkeypatch.chdir(tmp_path)
    write(src_dir / "index.page.md", "---\nlayout: missing.html\n---\n# Hi\n")
    with pytest.raises(SystemExit) as info:
        main([str(src_dir), "--out", str(dst_dir)])
    assert info.value.code == 1


def test_output_directory_may_not_contain_the_project(monkeypatch, tmp_path, src_dir, write):
    monkeypatch.chdir(tmp_path)
    write(src_dir / "index.page.md", "# Hi\n")
    with pytest.raises(SystemExit) as info:
        main([str(src_dir), "--out", str(tmp_path)])
    assert info.value.code == 1
    assert (src_dir / "index.page.md").is_file()


def test_invalid_port_is_a_configuration_error(monkeypatch, tmp_path, src_dir, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        main([str(src_dir), "--port", "eighty"])
    assert info.value.code == 1
    assert "Invalid port" in capsys.readouterr().err
