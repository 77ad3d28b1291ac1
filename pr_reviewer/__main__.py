import sys

from pr_reviewer.main import main

sys.exit(main())
