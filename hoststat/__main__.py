import sys

from hoststat.main import main

sys.exit(main())
