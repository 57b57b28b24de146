import sys

from summarytrees.cli import main

sys.exit(main())
