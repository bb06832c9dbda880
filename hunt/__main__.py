import sys

from hunt.cli import main

sys.exit(main())
