import sys

from tunnelsat.cli import main

sys.exit(main())
