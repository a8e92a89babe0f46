import sys

from rail_layout.main import main

sys.exit(main())
