import os
from dataclasses import replace

import pytest

from cache_warmer.logger import EnumerationError, ProjectFileNotFoundError
from cache_warmer.watch_core.config import ProjectConfiguration
from cache_warmer.watch_core import paths as paths_mod
from cache_warmer.watch_core.fingerprint import build_watch_map
from cache_warmer.watch_core.paths import (
    build_path_set,
    find_files,
    glob_project_files,
    is_excluded_dir,
    require_project_file,
)


def _rel(project, path_set):
    return {os.path.relpath(p, project).replace(os.sep, "/") for p in path_set}


@pytest.mark.unit
def test_default_scan_collects_symfony_dirs_env_and_front_controller(project, config):
    rel = _rel(project, build_path_set(config))

    assert rel == {
        ".env",
        ".env.local",
        "public/index.php",
        "config/services.yaml",
        "config/packages/framework.yaml",
        "src/Kernel.php",
        "src/Controller/HomeController.php",
        "templates/base.html.twig",
        "translations/messages.en.yaml",
    }


@pytest.mark.unit
def test_paths_are_absolute(config):
    assert all(os.path.isabs(p) for p in build_path_set(config))


@pytest.mark.unit
def test_gitignore_files_are_noise(project, config):
    assert str(project / "src" / ".gitignore") not in build_path_set(config)


@pytest.mark.unit
def test_git_metadata_never_watched(project, config, touch):
    touch(project / "src" / ".git" / "HEAD")
    touch(project / "config" / ".git" / "refs" / "heads" / "main")
    touch(project / ".git" / "HEAD")
    everything = replace(config, watch_dirs=config.watch_dirs + (".git", "."))

    for cfg in (config, everything):
        assert not any(".git" + os.sep in p for p in build_path_set(cfg))


@pytest.mark.unit
def test_exclude_fragment_is_a_substring_match(project, config, touch):
    touch(project / "src" / "Legacy" / "Old.php")
    touch(project / "src" / "LegacyBundle" / "Bundle.php")
    touch(project / "src" / "Modern" / "New.php")

    rel = _rel(project, build_path_set(config.with_excludes(["Legacy"])))

    assert "src/Modern/New.php" in rel
    assert not any("Legacy" in r for r in rel)


@pytest.mark.unit
def test_exclude_fragment_ignores_project_location(tmp_path, touch):
    # the project itself lives under a directory whose name contains ".git"
    root = tmp_path / "work.github" / "app"
    touch(root / "public" / "index.php")
    touch(root / "src" / "Kernel.php")
    cfg = ProjectConfiguration(project_dir=root)

    assert str(root / "src" / "Kernel.php") in build_path_set(cfg)


@pytest.mark.unit
def test_vendor_skipped_when_vendor_watch_disabled(project, config, touch):
    touch(project / "src" / "vendor" / "acme" / "Nested.php")

    result = build_path_set(config)

    assert not any(os.sep + "vendor" + os.sep in p for p in result)


@pytest.mark.unit
def test_vendor_allowlist_only_keeps_listed_packages(project, config):
    cfg = config.with_vendors(["symfony/http-kernel"])

    vendor_paths = [p for p in build_path_set(cfg) if p.startswith(str(project / "vendor"))]

    assert vendor_paths == [str(project / "vendor" / "symfony" / "http-kernel" / "Kernel.php")]


@pytest.mark.unit
def test_vendor_allowlist_prefix_holds_for_every_vendor_path(project, config, touch):
    touch(project / "vendor" / "symfony" / "http-kernel" / "Http" / "Request.php")
    touch(project / "src" / "vendor" / "acme" / "widgets" / "Nested.php")
    touch(project / "src" / "vendor" / "other" / "Skip.php")
    allow = ["symfony/http-kernel", "acme/widgets"]
    cfg = config.with_vendors(allow)

    for p in build_path_set(cfg):
        parts = p.split(os.sep)
        if "vendor" not in parts:
            continue
        after = "/".join(parts[parts.index("vendor") + 1:])
        assert any(after.startswith(name + "/") for name in allow), p


@pytest.mark.unit
def test_vendor_watch_without_allowlist_includes_whole_vendor(project, config):
    cfg = replace(config, vendor_watch=True)

    rel = _rel(project, build_path_set(cfg))

    assert {
        "vendor/autoload.php",
        "vendor/symfony/http-kernel/Kernel.php",
        "vendor/symfony/console/Application.php",
        "vendor/acme/widgets/Widget.php",
    } <= rel


@pytest.mark.unit
def test_missing_vendor_package_is_skipped(project, config):
    cfg = config.with_vendors(["does/not-exist", "acme/widgets"])

    rel = _rel(project, build_path_set(cfg))

    assert "vendor/acme/widgets/Widget.php" in rel


@pytest.mark.unit
def test_missing_front_controller_is_fatal(project, config):
    (project / "public" / "index.php").unlink()

    with pytest.raises(ProjectFileNotFoundError) as excinfo:
        build_path_set(config)

    assert str(excinfo.value) == f"file not found: {project / 'public' / 'index.php'}"


@pytest.mark.unit
def test_require_project_file_returns_absolute_path(project, config):
    assert require_project_file(config, "bin/console") == str(project / "bin" / "console")


@pytest.mark.unit
def test_glob_project_files_only_returns_files(project, config):
    (project / ".env.d").mkdir()

    found = sorted(os.path.basename(p) for p in glob_project_files(config, ".env*"))

    assert found == [".env", ".env.local"]


@pytest.mark.unit
def test_walk_errors_abort_the_build(project, config, monkeypatch):
    def broken_walk(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", top))
        return iter(())

    monkeypatch.setattr(paths_mod.os, "walk", broken_walk)

    with pytest.raises(EnumerationError):
        find_files(config, project / "src")


@pytest.mark.unit
def test_is_excluded_dir():
    assert is_excluded_dir("src/.git", [".git"])
    assert is_excluded_dir(".github/workflows", [".git"])
    assert not is_excluded_dir("src/Controller", [".git", "node_modules"])
    assert not is_excluded_dir("src", [""])


@pytest.mark.unit
def test_repeated_scans_are_identical(config):
    assert build_path_set(config) == build_path_set(config)


@pytest.mark.unit
@pytest.mark.skipif(not hasattr(os, "symlink") or os.name != "posix", reason="needs posix symlinks")
def test_dangling_links_and_fifos_are_not_watched(project, config):
    lock = project / "src" / ".#Kernel.php"
    os.symlink("user@host.1234", lock)
    pipe = project / "templates" / "reload.fifo"
    os.mkfifo(pipe)
    alias = project / "config" / "alias.yaml"
    os.symlink(project / "config" / "services.yaml", alias)

    paths = build_path_set(config)
    watch_map = build_watch_map(config)

    assert str(lock) not in paths
    assert str(pipe) not in paths
    assert str(alias) in paths
    assert set(watch_map) == set(paths)
