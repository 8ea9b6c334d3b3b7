import json
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPT = ROOT / "examples" / "user_service_demo.py"


def test_user_service_demo() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT / "src"), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, str(SCRIPT)],
        check=True,
        capture_output=True,
        text=True,
        env=env,
    )
    data = json.loads(result.stdout)
    assert data["names"] == ["Ada", "unknown"]
    assert data["renamed"] is True
    assert data["saved"] == ["Grace"]
    assert data["calls"] == ["get_is_active", "get_user", "get_is_active", "get_user", "get_user", "save"]
