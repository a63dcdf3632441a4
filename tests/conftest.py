from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable Terraform tree builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def sample_repo(repo_builder: RepoBuilder) -> RepoBuilder:
    """Two environments sharing leaf modules from ``modules/``."""
    repo_builder.write(
        {
            "modules/common/common-1/main.tf": """
                resource "null_resource" "one" {}
            """,
            "modules/common/common-2/main.tf": """
                resource "null_resource" "two" {}
            """,
            "modules/service/service-1/main.tf": """
                module "common" {
                  source = "../../common/common-2"
                }
            """,
            "environments/org/common/dev/main.tf": """
                module "common_1" {
                  source = "../../../../modules/common/common-1"
                }

                module "common_2" {
                  source = "../../../../modules/common/common-2"
                }
            """,
            "environments/org/service-1/dev/main.tf": """
                module "service" {
                  source = "../../../../modules/service/service-1"
                }
            """,
        }
    )
    return repo_builder
