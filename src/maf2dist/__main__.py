import sys

from maf2dist.cli import main

sys.exit(main())
