"""Export assembled drafts as JSON fixtures, then re-check them.

Extra arguments are passed to pytest, e.g. ``python tools/fill.py -k deposit``.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
OUT = Path(os.environ.get("ACP_FIXTURES_DIR", ROOT / "fixtures"))


def main(argv: list[str]) -> int:
    if OUT.exists():
        shutil.rmtree(OUT)

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT)])

    cmd = [sys.executable, "-m", "pytest", str(ROOT / "tests"), "-q", "--output", str(OUT), *argv]
    print("Running:", " ".join(cmd))
    status = subprocess.call(cmd, env=env, cwd=str(ROOT))
    if status != 0:
        return status

    written = sorted(OUT.rglob("*.json"))
    print(f"Wrote {len(written)} fixture files to {OUT}")
    return subprocess.call([sys.executable, str(ROOT / "tools" / "consume.py")], env=env, cwd=str(ROOT))


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
