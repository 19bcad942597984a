import sys

from keyguard.main import main

sys.exit(main())
