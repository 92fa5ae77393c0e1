"""Example: drive the import pipelines through the service layer (no Flask).

Usage: python examples/run_import.py schedule|time-clock <file> [company_id]
"""

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.shiftdesk.shiftdesk.container import build_container
from src.shiftdesk.shiftdesk.imports.readers import read_export


def main(argv):
    if len(argv) < 2 or argv[0] not in {"schedule", "time-clock"}:
        print(__doc__)
        return 2
    kind, path = argv[0], Path(argv[1])
    company_id = int(argv[2]) if len(argv) > 2 else 1

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    rows = read_export(path.read_bytes(), filename=path.name, max_rows=container.import_max_rows)
    service = container.schedule_import_service if kind == "schedule" else container.timeclock_import_service
    print(service.preview(company_id, rows))
    print(service.run(company_id, rows, file_name=path.name).as_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
