"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides the record definitions shared across test modules.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local ormgen package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of ormgen modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("ormgen"):
        del sys.modules[module_name]


USERS_YAML = """\
records:
  - name: User
    table_name: users
    id_field: user_id
    insertable: true
    deletable: true
    imports: ["import datetime"]
    fields:
      - name: user_id
        type: int
        column: id
      - name: first_name
        type: str
      - name: last_name
        type: str
      - name: email
        type: str
        get_optional: true
      - name: last_login
        type: datetime.datetime | None
        default: true
        set: true
    patches:
      - name: UpdateUserName
        fields: [first_name, last_name]
"""


@pytest.fixture
def users_yaml() -> str:
    """The users table: id, two names, optional email lookup, defaulted last_login."""
    return USERS_YAML


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    path = tmp_path / "users.yaml"
    path.write_text(USERS_YAML)
    return path
