import sys

from lifecycle_timeline.cli import main

sys.exit(main())
