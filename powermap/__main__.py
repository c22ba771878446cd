import sys

from powermap.cli import main

sys.exit(main())
