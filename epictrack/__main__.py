import sys

from epictrack.cli import main

sys.exit(main())
