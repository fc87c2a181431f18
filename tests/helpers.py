"""Test helpers - build small projects on disk for end-to-end tests."""

import textwrap
from pathlib import Path


class ProjectFiles:
    """
    A throwaway project tree rooted at a temporary directory.

    Use cases:
    - Writing source and markdown files for pipeline and CLI tests
    - Reading files back after scaffold has edited them
    """

    def __init__(self, root: Path):
        self.root = root

    def write(self, rel: str, text: str) -> Path:
        """Write dedented text to a project-relative path."""
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"))
        return path

    def read(self, rel: str) -> str:
        return (self.root / rel).read_text()

    def path(self, rel: str) -> Path:
        return self.root / rel


AUTH_PY = """
    # @docs: [auth-login]
    def login(username: str, password: str):
        return True


    def create_user(name):
        return name
"""

API_MD = """
    # API

    <!-- @docs-id: auth-login -->
    ## Login

    | Param | Type | Description |
    |-------|------|-------------|
    | username | string | Account name |
    | tenant_id | uuid | Tenant the account belongs to |

    <!-- @docs-id: create-user -->
    ## Create User

    - `name`: display name of the new user
"""
