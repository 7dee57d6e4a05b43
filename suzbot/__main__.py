import sys

from suzbot.runner import main

sys.exit(main())
