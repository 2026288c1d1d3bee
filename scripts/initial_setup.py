"""Create the data directory and apply database migrations."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from runplan.database import run_migrations
from runplan.logging_config import configure_logging
from runplan.models.plan_templates import validate_templates


def main() -> None:
    configure_logging()
    data_dir = Path("data")
    data_dir.mkdir(exist_ok=True)
    run_migrations()
    print("Database initialised at", data_dir)

    problems = validate_templates()
    for problem in problems:
        print("Template problem:", problem)
    if problems:
        sys.exit(1)


if __name__ == "__main__":
    main()
