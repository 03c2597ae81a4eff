import os
import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so `import cache_warmer...` works locally
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cache_warmer.watch_core.config import ProjectConfiguration  # noqa: E402


PROJECT_FILES = [
    ".env",
    ".env.local",
    "bin/console",
    "public/index.php",
    "config/services.yaml",
    "config/packages/framework.yaml",
    "src/Kernel.php",
    "src/Controller/HomeController.php",
    "src/.gitignore",
    "templates/base.html.twig",
    "translations/messages.en.yaml",
    "vendor/autoload.php",
    "vendor/symfony/http-kernel/Kernel.php",
    "vendor/symfony/console/Application.php",
    "vendor/acme/widgets/Widget.php",
    "node_modules/left-pad/index.js",
]


def touch(path: Path, content: str = "x\n", mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def project(tmp_path) -> Path:
    """A minimal Symfony/Flex layout with a vendor directory."""
    root = tmp_path / "app"
    for rel in PROJECT_FILES:
        touch(root / rel, mtime=1_700_000_000)
    return root


@pytest.fixture
def config(project) -> ProjectConfiguration:
    return ProjectConfiguration(project_dir=project)


@pytest.fixture(scope="session", autouse=True)
def _isolate_cache_warmer_env():
    """Keep developer CACHE_WARMER_* settings out of the tests."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("CACHE_WARMER_")}
    for k in saved:
        os.environ.pop(k)
    try:
        yield
    finally:
        os.environ.update(saved)


@pytest.fixture(name="touch")
def _touch_fixture():
    return touch
