import sys

from abiheader.cli import main

sys.exit(main())
