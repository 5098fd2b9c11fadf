import sys

from lecture_reporting.cli import main

sys.exit(main())
