"""Pytest configuration and shared fixtures."""

import importlib
from unittest.mock import Mock, patch

import pytest

from tfbackend.config import BackendConfig


@pytest.fixture
def config():
    """Plain (profile-less) backend config with an explicit region."""
    return BackendConfig.from_args(
        bucket="demo-bucket", key="env/prod/app.tfstate", region="eu-west-2"
    )


@pytest.fixture
def profile_config():
    """Backend config using the profile-aware variant."""
    return BackendConfig.from_args(
        bucket="demo-bucket",
        key="env/prod/app.tfstate",
        region="us-east-1",
        with_profile=True,
    )


@pytest.fixture
def mock_tools():
    """Pretend aws and terraform are installed and credentials are valid.

    Yields
    ------
    dict
        The ``which``, ``run`` and ``session`` mocks.
    """
    with patch("tfbackend.initializer.shutil.which") as mock_which, patch(
        "tfbackend.initializer.subprocess.run"
    ) as mock_run, patch("tfbackend.initializer.boto3.Session") as mock_session:
        mock_which.side_effect = lambda name: f"/usr/local/bin/{name}"
        mock_run.return_value = Mock(
            returncode=0, stdout="Terraform v1.9.5\non linux_amd64\n", stderr=""
        )
        sts = mock_session.return_value.client.return_value
        sts.get_caller_identity.return_value = {
            "Account": "123456789012",
            "Arn": "arn:aws:iam::123456789012:user/ci",
        }
        yield {"which": mock_which, "run": mock_run, "session": mock_session}


@pytest.fixture
def tf_tree(tmp_path):
    """Build a directory of .tf files from a mapping of relative path to text."""

    def _build(files):
        for rel, text in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return tmp_path

    return _build


@pytest.fixture
def reload_with_env(monkeypatch):
    """Reload a module with extra environment variables set.

    Module-level defaults are read at import, so the module is reloaded
    again without the variables on teardown.
    """
    reloaded = []

    def _reload(module, **env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        reloaded.append((module, list(env)))
        return importlib.reload(module)

    yield _reload

    for module, names in reloaded:
        for name in names:
            monkeypatch.delenv(name, raising=False)
        importlib.reload(module)
