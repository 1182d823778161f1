import sys

from securebox.cli import main

sys.exit(main())
