import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from weather_monitor.main import main


if __name__ == "__main__":
    sys.exit(main())
