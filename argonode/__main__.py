import sys

from argonode.main import main

sys.exit(main())
