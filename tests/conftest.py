"""
Pytest configuration and fixtures
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest


RULES_WITH_QUERY = """<?xml version="1.0" encoding="UTF-8"?>
<hy:rules xmlns:hy="http://www.hyfinity.com/xengine">
  <rule id="LoadRequests">
    <hy:target action="Query" name="loadRequests">
      <hy:wrapper>
        <hy:params>
          <hy:param name="sql_statement" type="java.lang.String">SELECT * FROM REQUEST WHERE ID = 1</hy:param>
        </hy:params>
      </hy:wrapper>
    </hy:target>
  </rule>
</hy:rules>
"""

RULES_WITHOUT_QUERY = """<?xml version="1.0" encoding="UTF-8"?>
<hy:rules xmlns:hy="http://www.hyfinity.com/xengine">
  <rule id="SaveRequest">
    <hy:target action="Update" name="saveRequest">
      <hy:params>
        <hy:param name="sql_statement" type="java.lang.String">UPDATE REQUEST SET STATUS = 'S'</hy:param>
      </hy:params>
    </hy:target>
  </rule>
</hy:rules>
"""

BINDINGS_WITH_NAMESPACE = """<?xml version="1.0" encoding="UTF-8"?>
<bindings xmlns="http://www.hyfinity.com/formmaker">
  <element name="FirstName">
    <value_xpath>/Data/ProcessVariables/firstName</value_xpath>
    <action>
      <xform_xpath>/FormData/firstName</xform_xpath>
    </action>
  </element>
  <element name="Submit"/>
</bindings>
"""

BINDINGS_WITHOUT_NAMESPACE = """<?xml version="1.0" encoding="UTF-8"?>
<bindings>
  <element name="FirstName">
    <value_xpath>/Data/ProcessVariables/firstName</value_xpath>
    <action>
      <xform_xpath>/FormData/firstName</xform_xpath>
    </action>
  </element>
  <element name="Submit"/>
</bindings>
"""


def write_file(path: Path, content: str | bytes = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def make_bundle(tmp_path: Path) -> Callable[[str, Dict[str, str | bytes]], Path]:
    """Build a bundle directory from a mapping of relative paths to file contents."""

    def _make(name: str, files: Dict[str, str | bytes]) -> Path:
        root = tmp_path / "bundles" / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            write_file(root / relative, content)
        return root

    return _make


@pytest.fixture
def result_dir(tmp_path: Path) -> Path:
    path = tmp_path / "results"
    path.mkdir()
    return path


@pytest.fixture
def sample_bundle(make_bundle) -> Path:
    return make_bundle(
        "LeaveRequest",
        {
            "webapps/js/app.js": "function init() {}\n",
            "webapps/js/jquery.min.js": "/* jquery */\n",
            "webapps/js/angular/foo.js": "angular.module('x');\n",
            "webapps/LeaveForm.html": "<html><body>Leave</body></html>\n",
            "webapps/LeaveForm_BizFlowEntry.html": "<html></html>\n",
            "webapps/theme/default.html": "<html></html>\n",
            "webapps/thumbnails/LeaveForm_1024.png": b"not really a png",
            "webapps/thumbnails/BizFlowEntry_1024.png": b"entry",
            "LeaveRequest_app/logicsheet_pool/Main_Controller_rules.xml": RULES_WITH_QUERY,
            "LeaveRequest_app/logicsheet_pool/Save_Controller_rules.xml": RULES_WITHOUT_QUERY,
            "LeaveRequest_app/hyfinityBindings/LeaveForm_bindings.xml": BINDINGS_WITH_NAMESPACE,
        },
    )
