import sys

from jitdist.cli import main

sys.exit(main())
